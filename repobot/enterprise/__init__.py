"""Branch sync from the open-source repository into the enterprise one."""

from repobot.enterprise.sync import EnterpriseSync, EnterpriseSyncError

__all__ = ["EnterpriseSync", "EnterpriseSyncError"]
