"""
PlanningPass HTTP API
=====================
Flask service around the report renderer.

Endpoints:
  - GET  /
  - GET  /health
  - POST /api/generate-report
  - POST /api/submit-form
  - GET  /api/test-email
"""

from __future__ import annotations

import logging

from flask import Flask, jsonify, request
from flask_cors import CORS

from .config import get_settings
from .errors import NotificationError, PersistenceError, ValidationError
from .service import ReportService


logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=(level or get_settings().log_level).upper(),
        format=LOG_FORMAT,
    )


def _log_mail_configuration(service: ReportService) -> None:
    settings = service.settings
    logger.info('Email configuration check:')
    logger.info('   - Email host: %s:%s', settings.email_host, settings.email_port)
    logger.info('   - Email user: %s', 'set' if settings.email_user else 'missing')
    logger.info('   - Email pass: %s', 'set' if settings.email_pass else 'missing')


def create_app(service: ReportService | None = None) -> Flask:
    service = service or ReportService()
    app = Flask(__name__)
    app.config['REPORT_SERVICE'] = service
    CORS(app)
    _log_mail_configuration(service)

    @app.route('/', methods=['GET'])
    def index():
        return 'Hello World , server functioning !'

    @app.route('/health', methods=['GET'])
    def health():
        return jsonify({'status': 'ok', 'service': service.settings.app_name})

    @app.route('/api/generate-report', methods=['POST'])
    def generate_report():
        data = request.get_json(silent=True)
        try:
            report = service.generate_report(data)
        except ValidationError as exc:
            return jsonify({'error': str(exc)}), 400
        except Exception:
            logger.exception('Error generating report')
            return jsonify({'error': 'Failed to generate report'}), 500
        return jsonify(report.to_payload())

    @app.route('/api/submit-form', methods=['POST'])
    def submit_form():
        data = request.get_json(silent=True)
        try:
            record = service.submit_form(data)
        except ValidationError as exc:
            logger.info('Form submission rejected: %s', exc)
            return jsonify({'error': str(exc)}), 400
        except PersistenceError:
            logger.exception('Error saving form data')
            return jsonify({'error': 'Failed to save form data'}), 500
        return jsonify({'message': 'Form saved successfully', 'id': str(record.id)})

    @app.route('/api/test-email', methods=['GET'])
    def test_email():
        if not service.mailer.configured:
            return (
                jsonify(
                    {
                        'error': 'Email configuration incomplete',
                        'details': {
                            'emailUser': bool(service.settings.email_user),
                            'emailPass': bool(service.settings.email_pass),
                        },
                    }
                ),
                500,
            )
        try:
            message_id = service.send_test_email()
        except NotificationError as exc:
            logger.error('Email test failed: %s', exc)
            return jsonify({'error': 'Email test failed', 'details': str(exc)}), 500
        return jsonify({'success': True, 'message': 'Test email sent successfully', 'messageId': message_id})

    return app


def run_server(host: str | None = None, port: int | None = None) -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    app = create_app()
    host = host or settings.server_host
    port = int(port or settings.server_port)
    logger.info('Server running on %s:%s', host, port)
    app.run(host=host, port=port, threaded=True)
