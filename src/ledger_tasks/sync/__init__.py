"""
Synchronization core.

Components:
- task_models.py: data structures (Task, ledger ops, PendingOperation) + record narrowing
- identity.py: IdentitySession (connected/account)
- task_cache.py: TaskCache, last-requested-wins reconciliation
- coordinator.py: submit -> confirm -> settle delay -> reconcile pipeline
"""
