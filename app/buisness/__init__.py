"""
Business layer for the field operations service.
Holds the location hierarchy, inventory ledger and requisition lifecycle,
independent of the database and the web layer.
"""
