"""Bundled context descriptors, resolved by ``classpath:`` URIs."""
