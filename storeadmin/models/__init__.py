from storeadmin.models.admin_user import AccessLevel, AdminStatus, AdminUser

__all__ = ["AccessLevel", "AdminStatus", "AdminUser"]
