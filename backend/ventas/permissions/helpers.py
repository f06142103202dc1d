# Overview: Utility functions for permission lookups and validation.

from .definitions import PERMISSION_DEFINITIONS


def get_all_permission_names():
    """Get list of all permission names."""
    return [perm[0] for perm in PERMISSION_DEFINITIONS]


def get_permissions_by_module(module):
    """Get all permissions owned by a module."""
    return [perm for perm in PERMISSION_DEFINITIONS if perm[2] == module]


def get_permission_definition(name):
    """Get full definition for a permission name."""
    for perm in PERMISSION_DEFINITIONS:
        if perm[0] == name:
            return {
                "permission_name": perm[0],
                "description": perm[1],
                "module": perm[2],
            }
    return None


def validate_permission_name(name):
    """Check if a permission name is valid."""
    return name in get_all_permission_names()
