"""
Subscribers Routes
==================

Provides a single endpoint, /api/newsletter:
- OPTIONS -- CORS preflight, empty 200
- POST    -- subscribe with a JSON body {"email": ...}
- GET     -- admin operations picked by query parameters
             (?admin=view, ?export=csv, ?stats, ?delete&id=N, ?check)
- any other method -- 405
"""

from flask import Response, request, jsonify
from flask_cors import cross_origin
from werkzeug.exceptions import MethodNotAllowed

from newsletter.core.logging_service import LoggingService
from . import subscribers_bp
from . import service
from .context import RequestContext
from .results import CsvExport, ErrorKind, Failure

# Common verbs reach the view; anything else is answered by method_not_allowed
ACCEPTED_METHODS = ['GET', 'POST', 'OPTIONS', 'PUT', 'PATCH', 'DELETE']


def render(result):
    """Turn an operation result into a Flask response"""
    if isinstance(result, CsvExport):
        return Response(
            result.content,
            status=result.status,
            mimetype='text/csv',
            headers={'Content-Disposition': f'attachment; filename={result.filename}'},
        )
    return jsonify(result.body()), result.status


@subscribers_bp.route('', methods=ACCEPTED_METHODS)
@cross_origin(origins='*', methods=['GET', 'POST', 'OPTIONS'], allow_headers=['Content-Type'])
def newsletter():
    """Single entry point; dispatch happens on method and query parameters"""
    if request.method == 'OPTIONS':
        return '', 200

    ctx = RequestContext.from_flask(request)
    try:
        result = service.dispatch(ctx)
    except Exception as e:
        LoggingService.log_error_with_traceback('subscribers', e, {'method': ctx.method})
        return jsonify({
            'success': False,
            'message': f'error processing request: {e}'
        }), 500

    return render(result)


@subscribers_bp.app_errorhandler(MethodNotAllowed)
def method_not_allowed(error):
    """Verbs the router rejects before the view runs (PROPFIND, TRACE, ...)"""
    LoggingService.warning('subscribers', f"Unsupported HTTP method: {request.method}")
    return render(Failure(ErrorKind.METHOD_NOT_ALLOWED, f'unsupported HTTP method: {request.method}'))
