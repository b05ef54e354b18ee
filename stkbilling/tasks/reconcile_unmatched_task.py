from stkbilling.extensions import celery_app
from stkbilling.services import get_services


@celery_app.task(name='reconcile_unmatched_callbacks_task')
def reconcile_unmatched_callbacks() -> int:
    """
    Apply dead-lettered payments whose subscriber has since been created

    This should be called periodically (e.g., by celery beat)

    Returns:
        Number of dead-letter entries resolved
    """
    return get_services().callbacks.reconcile_unmatched()
