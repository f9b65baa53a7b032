"""SLiM installer for Debian and Ubuntu.

Provides typed settings, capability Protocols with subprocess-backed
implementations, and the install plan run through the guarded pipeline in
``core`` with explicit dependency injection.
"""
