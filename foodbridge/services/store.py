from contextlib import contextmanager

from flask import current_app
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from foodbridge import db
from foodbridge.errors import FoodBridgeError, NotFound, PersistenceFailure


def get_or_raise(model, record_id, error=NotFound, fresh=False):
	if not record_id:
		raise error()
	try:
		record = db.session.get(model, record_id, populate_existing=fresh)
	except SQLAlchemyError as exc:
		db.session.rollback()
		current_app.logger.exception("Persistence failure loading %s %s", model.__name__, record_id)
		raise PersistenceFailure() from exc
	if record is None:
		raise error()
	return record


@contextmanager
def transaction(action, on_integrity_error=None):
	"""Commit everything done inside the block, or nothing.

	Domain errors raised inside the block roll back and pass through.
	Store errors roll back and surface as ``PersistenceFailure`` so callers
	never see a driver exception. ``on_integrity_error`` lets a caller map a
	constraint violation to a more specific domain error.
	"""
	try:
		yield db.session
		db.session.commit()
	except FoodBridgeError:
		db.session.rollback()
		raise
	except IntegrityError as exc:
		db.session.rollback()
		if on_integrity_error is not None:
			current_app.logger.warning("Constraint violation during %s: %s", action, exc.orig)
			raise on_integrity_error() from exc
		current_app.logger.exception("Persistence failure during %s", action)
		raise PersistenceFailure() from exc
	except SQLAlchemyError as exc:
		db.session.rollback()
		current_app.logger.exception("Persistence failure during %s", action)
		raise PersistenceFailure() from exc


def compare_and_set(record, allowed_statuses, expected_version=None, **values):
	"""Conditionally update ``record`` and report whether the row matched.

	The row is written only while its status is one of ``allowed_statuses``
	and, for versioned models, its version still equals ``expected_version``.
	Versioned rows get their version bumped on every successful write.
	"""
	model = type(record)
	statement = update(model).where(model.id == record.id, model.status.in_(allowed_statuses))

	if hasattr(model, "version"):
		if expected_version is not None:
			statement = statement.where(model.version == expected_version)
		values["version"] = model.version + 1

	result = db.session.execute(
		statement.values(**values).execution_options(synchronize_session=False)
	)
	db.session.expire(record)
	return result.rowcount == 1
