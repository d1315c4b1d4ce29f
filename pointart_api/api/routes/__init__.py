"""
API route modules.

This package contains subrouters for:
- Auth: login, register, logout, refresh, and current user
- Users: account administration and role changes
- Inventory: the five category tables and product categories
- Sales, Customers, Invoices
- Analytics, Notifications, Reports, Backup
- System: audit log and app settings
- Dashboard: the /ws/dashboard socket and its usage description

Routers are included from pointart_api.api.main (under the /api/v1 prefix).
"""
