"""Administrator accounts, invitations and role-based access for the storefront admin panel."""

__version__ = "0.1.0"
