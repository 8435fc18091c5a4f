from rest_framework.permissions import BasePermission


class HasCapability(BasePermission):
    """
    Permission: the authenticated user's role grants ``capability``.

    Usage:
        def get_permissions(self):
            if self.action == 'destroy':
                return [IsAuthenticated(), HasCapability(Capability.DELETE_ORDERS)]
            return super().get_permissions()
    """

    message = 'Your role does not allow this action.'

    def __init__(self, capability):
        self.capability = capability

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return user.can(self.capability)
