"""Local precondition failures raised before any remote call."""
from entities.models import Permission


class InsufficientPermissionError(PermissionError):
    """The connected account lacks a permission required by an action."""

    def __init__(self, guild_id: int, permission: Permission):
        self.guild_id = guild_id
        self.permission = permission
        super().__init__(
            f"Cannot perform action due to a lack of permission. "
            f"Missing permission: {permission.name} in guild {guild_id}"
        )
