"""
API permissions - the API is for the building's administrators only
"""
from rest_framework import permissions


class IsStaffAdmin(permissions.BasePermission):
    """
    Permission to only allow staff users (building administrators).
    """
    message = "Administrator access required"

    def has_permission(self, request, view):
        """Check if user is authenticated and marked as staff"""
        user = request.user
        return bool(user and user.is_authenticated and user.is_staff)
