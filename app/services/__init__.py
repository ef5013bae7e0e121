"""
Read-side helpers for the JSON routes.

Each service takes a loaded OperationsContext and shapes its state for a response: it
joins ledger rows with catalog and location names and rolls balances up the hierarchy.
Services never change requisitions or stock; every write goes through the context.
"""
