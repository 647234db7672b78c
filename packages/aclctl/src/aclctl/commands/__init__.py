"""aclctl command implementations."""
