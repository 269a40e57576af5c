"""
Flask routes for the award application form.

Blueprints:
- main: the HTML form, confirmation, error and privacy pages
- api: JSON validation, submission (JSON or PDF receipt) and the
  add-entry endpoint backing the dynamic sections
"""

import io
from datetime import date, datetime

from flask import (
    Blueprint, render_template, request, jsonify,
    session, redirect, url_for, send_file, current_app
)

from award_form.binding import bind_form
from award_form.receipt import generate_confirmation_pdf
from award_form.schema import MAX_SECTION_ITEMS, SECTIONS, get_section
from award_form.sections import (
    SectionCapReached, SectionController, build_researcher_fields, build_section_controllers
)
from award_form.security import RATE_LIMITS, get_client_ip, limiter
from award_form.validation import validate_payload
from award_form.workflow import PROCESSING_ERROR_MESSAGE, SubmissionWorkflow, WorkflowOutcome, WorkflowState


# Create blueprints
main_bp = Blueprint('main', __name__)
api_bp = Blueprint('api', __name__, url_prefix='/api')

DEFAULT_ERROR_MESSAGE = 'An error occurred while processing your request.'


def _workflow() -> SubmissionWorkflow:
    return SubmissionWorkflow(logger=current_app.logger)


def _today() -> date:
    return date.today()


def _render_form(outcome: WorkflowOutcome, status: int = 200):
    marked = outcome.result if outcome.state is WorkflowState.REJECTED else None
    controllers = build_section_controllers(outcome.record, marked, outcome.options)
    return render_template(
        'index.html',
        result=outcome.result,
        errors_by_section=outcome.result.get_errors_by_section(),
        researcher_fields=build_researcher_fields(outcome.record, marked, outcome.options),
        sections=SECTIONS,
        controllers=controllers,
        max_items=MAX_SECTION_ITEMS,
    ), status


def _json_payload():
    return request.get_json(silent=True)


def _missing_payload():
    return jsonify({
        'ok': False,
        'errors': [{'field': '', 'message': 'No JSON payload provided', 'code': 'missing_payload'}]
    }), 400


# Main routes
@main_bp.route('/', methods=['GET'])
def index():
    """Render an empty application form."""
    return _render_form(_workflow().start())


@main_bp.route('/', methods=['POST'])
@limiter.limit(RATE_LIMITS['submit'])
def submit():
    """Validate the posted form; re-display on failure, redirect on success."""
    payload = bind_form(request.form)
    outcome = _workflow().submit(payload, today=_today())

    if outcome.accepted:
        session['success_message'] = outcome.confirmation.message
        return redirect(url_for('main.success'))

    return _render_form(outcome)


@main_bp.route('/success')
def success():
    """Confirmation page shown after an accepted application."""
    message = session.pop('success_message', None)
    if message is None:
        return redirect(url_for('main.index'))
    current_app.logger.info(f'Success page displayed at: {datetime.utcnow().isoformat()}')
    return render_template('success.html', message=message)


@main_bp.route('/error')
def error():
    """Generic error page."""
    current_app.logger.warning(f'Error page accessed at: {datetime.utcnow().isoformat()}')
    message = session.pop('error_message', None) or DEFAULT_ERROR_MESSAGE
    return render_template('error.html', message=message)


@main_bp.route('/privacy')
def privacy():
    return render_template('privacy.html')


# API Routes
@api_bp.route('/validate', methods=['POST'])
@limiter.limit(RATE_LIMITS['validate'])
def api_validate():
    """
    Validate an application payload without submitting it.

    Returns:
        JSON response with validation result
    """
    try:
        payload = _json_payload()
        if payload is None:
            return _missing_payload()

        result = validate_payload(payload, _today())

        if result.is_valid:
            return jsonify({'ok': True, 'errors': []}), 200
        else:
            return jsonify(result.to_dict()), 422

    except Exception as e:
        current_app.logger.error(f'Validation error: {str(e)}')
        return jsonify({
            'ok': False,
            'errors': [{'field': '', 'message': 'Internal validation error', 'code': 'internal_error'}]
        }), 500


@api_bp.route('/submit', methods=['POST'])
@limiter.limit(RATE_LIMITS['api_submit'])
def api_submit():
    """
    Submit an application.

    Returns the confirmation as JSON when the client accepts JSON,
    otherwise the PDF receipt.
    """
    payload = _json_payload()
    if payload is None:
        return _missing_payload()

    outcome = _workflow().submit(payload, today=_today())

    if not outcome.accepted:
        if outcome.result.general_errors:
            return jsonify(outcome.result.to_dict()), 500
        return jsonify(outcome.result.to_dict()), 422

    accept_header = request.headers.get('Accept', '')

    try:
        if 'application/json' in accept_header:
            return jsonify({
                'ok': True,
                'confirmation': outcome.confirmation.to_dict(),
            }), 200

        pdf_bytes, pdf_hash = generate_confirmation_pdf(
            outcome.confirmation,
            outcome.record,
            institution=current_app.config['INSTITUTION_NAME'],
            timezone=current_app.config['DISPLAY_TIMEZONE'],
        )
        response = send_file(
            io.BytesIO(pdf_bytes),
            mimetype='application/pdf',
            as_attachment=True,
            download_name=f'Application_Receipt_{outcome.confirmation.reference}.pdf'
        )
        response.headers['X-Receipt-SHA256'] = pdf_hash
        return response

    except Exception as e:
        current_app.logger.error(f'Receipt generation error: {str(e)}', exc_info=True)
        return jsonify({
            'ok': False,
            'errors': [{'field': '', 'message': PROCESSING_ERROR_MESSAGE, 'code': 'processing_error'}]
        }), 500


@api_bp.route('/sections/<section_name>/items', methods=['POST'])
@limiter.limit(RATE_LIMITS['sections'])
def api_add_section_item(section_name: str):
    """
    Add a blank entry to a section that currently holds `count` entries.

    Body: {"count": n}
    """
    section = get_section(section_name)
    if section is None:
        return jsonify({'ok': False, 'error': f'Unknown section: {section_name}'}), 404

    body = request.get_json(silent=True)
    count = body.get('count', 1) if isinstance(body, dict) else 1
    if isinstance(count, bool) or not isinstance(count, int) or count < 1:
        return jsonify({'ok': False, 'error': 'count must be a positive integer'}), 400

    items = [section.item_type(id=position + 1) for position in range(min(count, MAX_SECTION_ITEMS + 1))]
    controller = SectionController.from_items(section, items)

    try:
        block = controller.add_item()
    except SectionCapReached as e:
        current_app.logger.info(f'Section cap reached for {section_name} from {get_client_ip()}')
        return jsonify({'ok': False, 'error': str(e), 'count': controller.count}), 409

    return jsonify({
        'ok': True,
        'count': controller.count,
        'focus_id': controller.focus_id,
        'block': block.to_dict(),
    }), 201


# Error handlers
@main_bp.errorhandler(404)
@api_bp.errorhandler(404)
def not_found(error):
    """Handle 404 errors."""
    if request.is_json or request.path.startswith('/api/'):
        return jsonify({'ok': False, 'error': 'Not found'}), 404
    return render_template('error.html', message='Page not found'), 404


@main_bp.errorhandler(500)
@api_bp.errorhandler(500)
def internal_error(error):
    """Handle 500 errors."""
    original = getattr(error, 'original_exception', None)
    current_app.logger.error(
        f'An unhandled exception occurred during request processing: {str(original or error)}',
        exc_info=original
    )
    if request.is_json or request.path.startswith('/api/'):
        return jsonify({'ok': False, 'error': 'Internal server error'}), 500
    session['error_message'] = PROCESSING_ERROR_MESSAGE
    return redirect(url_for('main.error'))


@main_bp.errorhandler(429)
@api_bp.errorhandler(429)
def rate_limit_handler(error):
    """Handle rate limit errors."""
    if request.is_json or request.path.startswith('/api/'):
        return jsonify({
            'ok': False,
            'error': 'Rate limit exceeded. Please try again later.'
        }), 429
    return render_template('error.html', message='Too many requests. Please try again later.'), 429
