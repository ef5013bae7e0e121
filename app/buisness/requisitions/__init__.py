"""
Requisition business layer.

- requisition.py - requisition values and log entries
- status_validator.py - transition table and ledger effects
- role_gate.py - who may move or see a requisition
- state_machine.py - pure transition decisions
- requisition_store.py - committed state and units of work
- sync_coordinator.py - merge of externally created requisitions
"""
