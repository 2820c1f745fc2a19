"""
API route modules.

This package contains subrouters for:
- Auth: login, register, logout, refresh, and current user
- Users: user listing and role changes (admin)
- Inventory: items, stock status and summary counters
- Usage: stock deductions and the usage log
- Organization: sectors, machines and machine assignments
- Reorder: purchase list, export and AI recommendations
- Reports: usage exports and per-sector totals

Routers are included from plant_inventory.api.main (under the /api/v1 prefix).
"""
