"""
Subscriber Operations
=====================

Dispatches a RequestContext to one of the subscriber operations:

- POST                  -- subscribe
- GET ?admin=view       -- list all subscribers
- GET ?export=csv       -- CSV export
- GET ?stats            -- subscriber statistics
- GET ?delete&id=<id>   -- delete one subscriber
- GET ?check            -- health check

Each operation returns a Success, CsvExport or Failure (see results.py).
Storage errors are caught here, rolled back and logged; nothing raises
past dispatch() for expected failures.
"""

import csv
import io
import platform
from datetime import date, timedelta

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from newsletter.core.database import Database, db
from newsletter.core.logging_service import LoggingService
from .context import SubscribeRequest, coerce_id
from .models import Subscriber, format_timestamp
from .results import CsvExport, ErrorKind, Failure, Success

READ_METHOD = 'GET'
WRITE_METHOD = 'POST'

CSV_DELIMITER = ';'
CSV_HEADER = ['Email', 'Data Abonarii']
RECENT_LIMIT = 5
WEEK = timedelta(days=7)
MONTH = timedelta(days=30)

SOURCE = 'subscribers'

# Values of ?id that count as missing, so the request falls through to later selectors
EMPTY_IDS = (None, '', '0')


def _error_text(error):
    """Driver-level message when there is one, else the SQLAlchemy message"""
    orig = getattr(error, 'orig', None)
    return str(orig) if orig is not None else str(error)


def _storage_failure(operation, error, message='error processing request', details=None):
    db.session.rollback()
    context = {'operation': operation}
    if details:
        context.update(details)
    LoggingService.log_error_with_traceback(SOURCE, error, context)
    return Failure(ErrorKind.STORAGE_ERROR, f'{message}: {_error_text(error)}')


def _newest_first(*columns):
    stmt = db.select(*columns) if columns else db.select(Subscriber)
    return stmt.order_by(Subscriber.created_at.desc(), Subscriber.id.desc())


def _count(*criteria):
    stmt = db.select(db.func.count(Subscriber.id))
    if criteria:
        stmt = stmt.where(*criteria)
    return db.session.scalar(stmt) or 0


def _find_subscriber_id(email):
    return db.session.scalar(db.select(Subscriber.id).where(Subscriber.email == email))


# ===================
# BOOTSTRAP
# ===================

def bootstrap():
    """
    Connect to storage and make sure the subscribers table exists.

    Returns None when storage is ready, otherwise the Failure to send back.
    The failure carries non-sensitive debug info (driver availability, host,
    database name) for operators.
    """
    uri = current_app.config['SQLALCHEMY_DATABASE_URI']
    try:
        Database.ensure_schema()
        Database.connect()
    except SQLAlchemyError as e:
        db.session.rollback()
        target = Database.describe_target(uri)
        debug_info = {
            'driver_available': Database.driver_available(uri),
            'host': target['host'],
            'database': target['database'],
        }
        LoggingService.error('bootstrap', f"Database connection error: {_error_text(e)}", debug_info)
        return Failure(
            ErrorKind.STORAGE_ERROR,
            f'database connection error: {_error_text(e)}',
            {'debug_info': debug_info},
        )

    LoggingService.debug('bootstrap', 'Database connection successful')
    return None


# ===================
# OPERATIONS
# ===================

def subscribe(ctx):
    """Validate the posted email and store it with the caller's IP"""
    parsed = SubscribeRequest.parse(ctx.body)
    if isinstance(parsed, Failure):
        LoggingService.warning(SOURCE, f"Subscribe rejected: {parsed.message}")
        return parsed

    email = parsed.email
    try:
        existing_id = _find_subscriber_id(email)
    except SQLAlchemyError as e:
        return _storage_failure('subscribe', e, details={'email': email})

    if existing_id is not None:
        LoggingService.info(SOURCE, 'Duplicate subscription', {'email': email, 'subscriber_id': existing_id})
        return Failure(ErrorKind.CONFLICT, 'already subscribed')

    ip_address = ctx.client_ip()
    subscriber = Subscriber(email=email, ip_address=ip_address)
    try:
        db.session.add(subscriber)
        db.session.commit()
    except IntegrityError as e:
        # Another request inserted the same email after our lookup
        db.session.rollback()
        LoggingService.warning(SOURCE, 'Duplicate subscription on insert', {
            'email': email, 'ip': ip_address, 'error': _error_text(e)
        })
        return Failure(ErrorKind.CONFLICT, 'already subscribed')
    except SQLAlchemyError as e:
        return _storage_failure(
            'subscribe', e,
            'error processing request: could not save subscriber',
            {'email': email, 'ip': ip_address},
        )

    subscriber_id = subscriber.id
    LoggingService.info(SOURCE, 'Newsletter subscription', {
        'email': email, 'ip': ip_address, 'subscriber_id': subscriber_id
    })
    return Success({
        'message': 'subscribed successfully',
        'subscriber_id': subscriber_id,
    })


def list_subscribers(ctx):
    """All subscribers, newest first"""
    try:
        rows = db.session.scalars(_newest_first()).all()
    except SQLAlchemyError as e:
        return _storage_failure('list', e)

    emails = [row.to_dict() for row in rows]
    return Success({'emails': emails, 'total': len(emails)})


def export_csv(ctx):
    """Semicolon-delimited export of email and subscription date"""
    try:
        rows = db.session.execute(_newest_first(Subscriber.email, Subscriber.created_at)).all()
    except SQLAlchemyError as e:
        return _storage_failure('export', e)

    buffer = io.StringIO()
    writer = csv.writer(buffer, delimiter=CSV_DELIMITER, lineterminator='\n')
    writer.writerow(CSV_HEADER)
    for email, created_at in rows:
        writer.writerow([email, format_timestamp(created_at)])

    LoggingService.info(SOURCE, 'Subscribers exported', {'rows': len(rows)})
    return CsvExport(
        filename=f'newsletter_subscribers_{date.today().isoformat()}.csv',
        content=buffer.getvalue(),
    )


def subscriber_stats(ctx):
    """Totals, trailing week/month counts, growth rate and the latest signups"""
    try:
        # Windows are measured against the storage clock, the same clock
        # that stamps created_at
        now = db.session.scalar(db.select(db.func.now()))
        total = _count()
        this_week = _count(Subscriber.created_at >= now - WEEK)
        this_month = _count(Subscriber.created_at >= now - MONTH)
        recent = db.session.scalars(_newest_first().limit(RECENT_LIMIT)).all()
    except SQLAlchemyError as e:
        return _storage_failure('stats', e)

    growth_rate = round(this_week / total * 100, 2) if total > 0 else 0

    return Success({
        'stats': {
            'total_subscribers': total,
            'this_week': this_week,
            'this_month': this_month,
            'growth_rate': growth_rate,
            'recent_subscribers': [row.to_summary() for row in recent],
        }
    })


def delete_subscriber(ctx):
    """Delete one subscriber by id"""
    subscriber_id = coerce_id(ctx.args.get('id'))
    try:
        result = db.session.execute(
            db.delete(Subscriber).where(Subscriber.id == subscriber_id)
        )
        affected_rows = result.rowcount
        db.session.commit()
    except SQLAlchemyError as e:
        return _storage_failure(
            'delete', e,
            'error processing request: could not delete subscriber',
            {'subscriber_id': subscriber_id},
        )

    if affected_rows > 0:
        LoggingService.info(SOURCE, 'Subscriber deleted', {'subscriber_id': subscriber_id})
        return Success({'message': 'deleted successfully'})

    LoggingService.warning(SOURCE, 'Delete matched no subscriber', {'subscriber_id': subscriber_id})
    return Failure(ErrorKind.NOT_FOUND, 'subscriber not found')


def health_check(ctx):
    target = Database.describe_target(current_app.config['SQLALCHEMY_DATABASE_URI'])
    return Success({
        'message': 'API is working',
        'server_info': {
            'python_version': platform.python_version(),
            'storage_version': Database.server_version(),
            'database': target['database'],
            'host': target['host'],
        }
    })


# ===================
# DISPATCH
# ===================

def select_read_operation(args):
    """Pick the GET operation for the query parameters, first match wins"""
    if args.get('admin') == 'view':
        return list_subscribers
    if args.get('export') == 'csv':
        return export_csv
    if 'stats' in args:
        return subscriber_stats
    if 'delete' in args and args.get('id') not in EMPTY_IDS:
        return delete_subscriber
    if 'check' in args:
        return health_check
    return None


def dispatch(ctx):
    """Run the operation the request asks for and return its result"""
    if ctx.method not in (READ_METHOD, WRITE_METHOD):
        LoggingService.warning(SOURCE, f"Unsupported HTTP method: {ctx.method}")
        return Failure(ErrorKind.METHOD_NOT_ALLOWED, f'unsupported HTTP method: {ctx.method}')

    failure = bootstrap()
    if failure is not None:
        return failure

    if ctx.method == WRITE_METHOD:
        return subscribe(ctx)

    operation = select_read_operation(ctx.args)
    if operation is None:
        LoggingService.warning(SOURCE, 'Invalid GET parameters', {'args': ctx.args})
        return Failure(ErrorKind.INVALID_INPUT, 'invalid GET parameters, use ?check for testing')
    return operation(ctx)
