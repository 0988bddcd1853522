"""
Wide event logging: one structured log line per request.

The middleware opens `request._wide_event` before the view runs; views add
their own context under `request._wide_event['extra']`. When the response
is ready the whole event is emitted as a single JSON line on the
`wide_event` logger.
"""
import json
import logging
import time
import uuid

logger = logging.getLogger('wide_event')


class WideEventLoggingMiddleware:

  def __init__(self, get_response):
    self.get_response = get_response

  def __call__(self, request):
    started = time.monotonic()
    request._wide_event = {
      'request_id': request.headers.get('X-Request-Id') or uuid.uuid4().hex,
      'method': request.method,
      'path': request.path,
      'extra': {},
    }

    status = 500
    try:
      response = self.get_response(request)
      status = response.status_code
      return response
    finally:
      event = request._wide_event
      event['status'] = status
      event['duration_ms'] = round((time.monotonic() - started) * 1000, 2)

      level = logging.WARNING if status >= 500 else logging.INFO
      logger.log(level, json.dumps(event, default=str))

  def process_exception(self, request, exception):
    """Record an unhandled view error; Django still builds the 500 response."""
    event = getattr(request, '_wide_event', None)
    if event is not None:
      event['error'] = f'{type(exception).__name__}: {exception}'
    return None
