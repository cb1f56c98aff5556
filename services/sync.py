"""Push finalized records to the table store, queueing them locally when offline."""

import logging

import requests

from data import db as offline
from services import table_client
from services.table_client import TableStoreError
from workflows import record_id

logger = logging.getLogger(__name__)

_SENDERS = {
    "insert": lambda session, w: table_client.insert(session, w["table"], w["body"]),
    "update": lambda session, w: table_client.update(
        session, w["table"], w["filter"], w["body"]
    ),
}


def _finalize_writes(kind, record, update, item_rows):
    rid = record_id(kind, record)
    writes = [
        {
            "method": "update",
            "table": kind.table,
            "filter": f"{kind.id_field}=eq.{rid}",
            "body": update,
        }
    ]
    if item_rows:
        writes.append(
            {"method": "insert", "table": kind.item_table, "filter": None, "body": item_rows}
        )
    return writes


def save_finalized(session, db, db_lock, kind, record, update, item_rows):
    """Write a finalized record and its item rows.

    Returns ``True`` if everything reached the table store.  On failure the
    remaining writes are queued in the offline database and ``False`` is
    returned.
    """

    writes = _finalize_writes(kind, record, update, item_rows)
    for index, write in enumerate(writes):
        try:
            _SENDERS[write["method"]](session, write)
        except (requests.RequestException, TableStoreError):
            logger.exception(
                "Table store unavailable, queueing %d write(s) for %s %s",
                len(writes) - index,
                kind.value,
                record_id(kind, record),
            )
            for pending in writes[index:]:
                offline.queue_write(
                    db,
                    db_lock,
                    pending["method"],
                    pending["table"],
                    pending["body"],
                    pending["filter"],
                )
            return False
    return True


def flush_pending(session, db, db_lock):
    """Replay queued writes in order, stopping at the first failure.

    Returns the number of writes that were delivered.
    """

    sent = 0
    for write in offline.load_pending(db, db_lock):
        try:
            _SENDERS[write["method"]](session, write)
        except (requests.RequestException, TableStoreError) as exc:
            logger.warning("Stopped flushing offline queue at write %s: %s", write["id"], exc)
            break
        offline.delete_pending(db, db_lock, write["id"])
        sent += 1
    if sent:
        logger.info("Flushed %d queued write(s)", sent)
    return sent
