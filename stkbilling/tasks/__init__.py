from stkbilling.tasks.reconcile_unmatched_task import reconcile_unmatched_callbacks

__all__ = ['reconcile_unmatched_callbacks']
