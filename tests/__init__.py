"""route-runner test suite."""
