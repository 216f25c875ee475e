"""AWS Lambda handler for Brockport academic calendar questions."""
import json
import logging
import os
import time
from datetime import datetime
from typing import Any, Callable, Dict, Optional, Tuple
from zoneinfo import ZoneInfo

import requests

from processor.event_calendar import EventCalendar
from processor.models import Tense
from scraper.brockport_calendar import BrockportCalendarScraper


# Configure JSON logging
class JsonFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            'timestamp': self.formatTime(record),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name
        }

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def setup_logging(log_level: str = 'INFO') -> None:
    """
    Configure logging with JSON formatter.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    root_logger = logging.getLogger()

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root_logger.addHandler(handler)

    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))


def local_clock(timezone_name: str) -> Callable[[], datetime]:
    """Return a clock giving the naive wall time in the calendar's timezone."""
    zone = ZoneInfo(timezone_name)
    return lambda: datetime.now(zone).replace(tzinfo=None)


def format_date(value: datetime) -> str:
    """
    Format a date the way the assistant speaks it.

    Args:
        value: Date or datetime to format

    Returns:
        Text such as "June 9, 2026"
    """
    return f"{value:%B} {value.day}, {value:%Y}"


def parse_request(event: Dict[str, Any]) -> Tuple[str, Dict[str, Any]]:
    """
    Extract the intent name and parameters from a Dialogflow webhook request.

    Args:
        event: API Gateway proxy event with a JSON body, or the webhook
            request itself

    Returns:
        Tuple of (intent name, parameters)

    Raises:
        ValueError: If the request carries no intent
    """
    payload = event
    if 'body' in event:
        body = event['body'] or '{}'
        payload = json.loads(body) if isinstance(body, str) else body

    query_result = payload.get('queryResult', {})
    intent = query_result.get('intent', {}).get('displayName')
    if not intent:
        raise ValueError('Request does not name an intent')

    return intent, query_result.get('parameters') or {}


def _tense_param(params: Dict[str, Any]) -> Tense:
    """
    Read the tense parameter, defaulting to upcoming events only.

    Args:
        params: Dialogflow intent parameters

    Returns:
        Requested tense

    Raises:
        ValueError: If the tense label is unknown
    """
    return Tense.from_label(str(params.get('tense') or Tense.NOT_PAST.value))


def get_date(calendar: EventCalendar, params: Dict[str, Any], clean_names: bool) -> str:
    """Intent "getdate": when does an event happen."""
    event_name = str(params.get('event', ''))
    tense = _tense_param(params)
    dates = calendar.lookup_by_name(event_name, tense, clean_names)

    response = f"You asked about {event_name}"
    if tense == Tense.PAST:
        response += ", including past events"
    response += ".\n"

    if not dates:
        return response + "There are no events occurring with that name."

    if len(dates) > 1:
        response += f"I found {len(dates)} possible dates with this event.\n"

    for match in dates:
        response += f"I found {match.name} occurring on {format_date(match.date)}.\n"
    return response.rstrip('\n')


def get_event(calendar: EventCalendar, params: Dict[str, Any], clean_names: bool) -> str:
    """Intent "getevent": what happens on a date."""
    raw_date = str(params.get('date', ''))
    day = datetime.fromisoformat(raw_date.replace('Z', '+00:00'))
    tense = _tense_param(params)

    response = f"You asked about {format_date(day)}"
    if tense == Tense.PAST:
        response += ", including past events"
    response += ".\n"

    event_names = calendar.lookup_by_date(day, clean_names)
    if event_names is None:
        return response + "There were no events found."
    return response + f"The event is {event_names}."


def get_days_until_event(calendar: EventCalendar, params: Dict[str, Any], clean_names: bool) -> str:
    """Intent "getdaysuntilevent": how many days until an event."""
    event_name = str(params.get('event', ''))
    response = f"You asked about how many days there are until {event_name}.\n"

    match = calendar.days_until(event_name, clean_names)
    if match is None:
        return response + "There were no events found."

    days = calendar.count_days_until(match)
    return response + f"There are {days} days until {match.name}."


def get_future_events(calendar: EventCalendar, params: Dict[str, Any], clean_names: bool) -> str:
    """Intent "getfutureevents": what happens in the next N days."""
    num_days = int(params['numdays'])
    events = calendar.events_in_window(num_days, clean_names)

    response = f"You asked about upcoming events in the next {num_days} days.\n"
    if not events:
        return response + "There were no events found."

    if len(events) == 1:
        response += f"There was one event found in the next {num_days} days:\n"
    else:
        response += f"There were {len(events)} events found in the next {num_days} days:\n"

    return response + ",\n".join(
        f"{entry.name} on {format_date(entry.date)}" for entry in events
    )


INTENTS = {
    'getdate': get_date,
    'getevent': get_event,
    'getdaysuntilevent': get_days_until_event,
    'getfutureevents': get_future_events,
}


def validate_parameters(intent: str, params: Dict[str, Any], max_window_days: int) -> Optional[str]:
    """
    Check caller input before the calendar is fetched.

    Returns:
        Message to say back to the user, or None if the input is valid
    """
    if intent == 'getfutureevents':
        try:
            num_days = int(params.get('numdays'))
        except (TypeError, ValueError):
            num_days = 0
        if not 0 < num_days <= max_window_days:
            return f"Number of days must be between 1 and {max_window_days}."

    if intent in ('getdate', 'getevent'):
        try:
            _tense_param(params)
        except ValueError:
            return "Please ask about past or upcoming events."

    if intent == 'getevent':
        try:
            datetime.fromisoformat(str(params.get('date', '')).replace('Z', '+00:00'))
        except ValueError:
            return "I could not understand that date."

    return None


def _response(status_code: int, body: Dict[str, Any]) -> Dict[str, Any]:
    """
    Wrap a JSON body in an API Gateway proxy response.

    Args:
        status_code: HTTP status code
        body: Response payload

    Returns:
        Proxy response dict
    """
    return {
        'statusCode': status_code,
        'headers': {'Content-Type': 'application/json'},
        'body': json.dumps(body)
    }


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Main Lambda handler answering Dialogflow calendar intents.

    Args:
        event: API Gateway proxy event carrying a Dialogflow webhook request
        context: Lambda context object

    Returns:
        Response dict with statusCode and a fulfillmentText body
    """
    # Read configuration from environment variables
    calendar_url = os.environ.get('CALENDAR_URL', BrockportCalendarScraper.BASE_URL)
    log_level = os.environ.get('LOG_LEVEL', 'INFO')
    timeout_seconds = int(os.environ.get('TIMEOUT_SECONDS', '30'))
    max_window_days = int(os.environ.get('MAX_WINDOW_DAYS', '50'))
    clean_names = os.environ.get('CLEAN_NAMES', 'true').lower() == 'true'
    timezone_name = os.environ.get('CALENDAR_TIMEZONE', 'America/New_York')

    setup_logging(log_level)
    logger = logging.getLogger(__name__)

    start_time = time.time()

    try:
        intent, params = parse_request(event)
    except (ValueError, AttributeError) as e:
        logger.warning(f"Rejected malformed request: {e}")
        return _response(400, {'message': 'Malformed webhook request', 'error': str(e)})

    logger.info(
        "Lambda execution started",
        extra={'intent': intent, 'calendar_url': calendar_url}
    )

    fulfill = INTENTS.get(intent)
    if fulfill is None:
        logger.warning(f"Unknown intent: {intent}")
        return _response(400, {'message': f"Unknown intent '{intent}'"})

    invalid = validate_parameters(intent, params, max_window_days)
    if invalid:
        logger.info(f"Invalid parameters for {intent}: {invalid}")
        return _response(200, {'fulfillmentText': invalid})

    try:
        # Fetch and index the calendar with error handling
        try:
            logger.info("Fetching events from calendar")
            scraper = BrockportCalendarScraper(url=calendar_url, timeout=timeout_seconds)
            calendar = EventCalendar.from_website(scraper, clock=local_clock(timezone_name))
        except requests.RequestException as e:
            logger.error(
                f"Failed to fetch events from calendar after retries: {str(e)}",
                extra={'error_type': type(e).__name__},
                exc_info=True
            )
            duration = time.time() - start_time
            return _response(500, {
                'message': 'Failed to fetch calendar events',
                'fulfillmentText': "Sorry, I couldn't reach the academic calendar right now.",
                'error': str(e),
                'error_type': type(e).__name__,
                'duration_seconds': round(duration, 2)
            })

        text = fulfill(calendar, params, clean_names)

        duration = time.time() - start_time
        logger.info(
            "Lambda execution completed successfully",
            extra={
                'intent': intent,
                'indexed_dates': len(calendar.index),
                'duration_seconds': round(duration, 2)
            }
        )

        return _response(200, {'fulfillmentText': text})

    except Exception as e:
        duration = time.time() - start_time

        logger.error(
            f"Lambda execution failed: {str(e)}",
            extra={
                'duration_seconds': round(duration, 2),
                'error_type': type(e).__name__
            },
            exc_info=True
        )

        return _response(500, {
            'message': 'Request failed',
            'error': str(e),
            'error_type': type(e).__name__,
            'duration_seconds': round(duration, 2)
        })
