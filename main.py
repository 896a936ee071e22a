from __future__ import annotations

import argparse
import json
import sys
from dataclasses import asdict, is_dataclass
from datetime import datetime
from pathlib import Path

from planningpass.config import get_settings
from planningpass.errors import PlanningPassError
from planningpass.report.classifier import classify
from planningpass.server import configure_logging, run_server
from planningpass.service import ReportService


def _print_json(payload: dict) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))


def _error(message: str) -> int:
    _print_json({'status': 'error', 'message': message})
    return 2


def _read_text(path_arg: str) -> str | None:
    if path_arg == '-':
        return sys.stdin.read()
    path = Path(path_arg).expanduser().resolve()
    if not path.exists() or not path.is_file():
        return None
    return path.read_text(encoding='utf-8')


def _read_payload(path_arg: str) -> dict | None:
    text = _read_text(path_arg)
    if text is None:
        return None
    return json.loads(text)


def _write_pdf(path_arg: str, pdf_bytes: bytes) -> Path:
    output_path = Path(path_arg).expanduser().resolve()
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(pdf_bytes)
    return output_path


def cmd_serve(args: argparse.Namespace) -> int:
    run_server(host=args.host, port=args.port)
    return 0


def cmd_classify(args: argparse.Namespace) -> int:
    raw_report = _read_text(args.input)
    if raw_report is None:
        return _error(f'Report text not found: {args.input}')
    blocks = []
    for block in classify(raw_report):
        row = asdict(block) if is_dataclass(block) else {}
        row['kind'] = type(block).__name__
        blocks.append(row)
    _print_json({'count': len(blocks), 'blocks': blocks})
    return 0


def cmd_render(args: argparse.Namespace) -> int:
    raw_report = _read_text(args.input)
    if raw_report is None:
        return _error(f'Report text not found: {args.input}')
    service = ReportService()
    generated_at = datetime.fromisoformat(args.generated_at) if args.generated_at else None
    try:
        pdf_bytes = service.render_report(raw_report, generated_at=generated_at, brand=args.brand)
    except PlanningPassError as exc:
        return _error(str(exc))
    output_path = _write_pdf(args.output, pdf_bytes)
    _print_json({'status': 'ok', 'output': str(output_path), 'size_bytes': len(pdf_bytes)})
    return 0


def cmd_generate(args: argparse.Namespace) -> int:
    payload = _read_payload(args.payload)
    if payload is None:
        return _error(f'Payload not found: {args.payload}')
    try:
        report = ReportService().generate_report(payload)
    except PlanningPassError as exc:
        return _error(str(exc))
    output_path = _write_pdf(args.output, report.pdf)
    _print_json({'status': 'ok', 'output': str(output_path), 'content': report.content})
    return 0


def cmd_submit(args: argparse.Namespace) -> int:
    payload = _read_payload(args.payload)
    if payload is None:
        return _error(f'Payload not found: {args.payload}')
    try:
        record = ReportService().submit_form(payload)
    except PlanningPassError as exc:
        return _error(str(exc))
    _print_json({'status': 'ok', 'id': str(record.id), 'created_at': record.created_at.isoformat()})
    return 0


def cmd_test_email(args: argparse.Namespace) -> int:
    try:
        message_id = ReportService().send_test_email()
    except PlanningPassError as exc:
        return _error(str(exc))
    _print_json({'status': 'ok', 'message_id': message_id})
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='PlanningPass report service CLI')
    sub = parser.add_subparsers(dest='command', required=True)

    serve = sub.add_parser('serve', help='Run the HTTP API')
    serve.add_argument('--host', required=False)
    serve.add_argument('--port', type=int, required=False)
    serve.set_defaults(func=cmd_serve)

    classify_cmd = sub.add_parser('classify', help='Show the blocks found in a report text file')
    classify_cmd.add_argument('--input', required=True, help='Report text file, or - for stdin')
    classify_cmd.set_defaults(func=cmd_classify)

    render_cmd = sub.add_parser('render', help='Render a report text file to PDF')
    render_cmd.add_argument('--input', required=True, help='Report text file, or - for stdin')
    render_cmd.add_argument('--output', required=True, help='Output PDF path')
    render_cmd.add_argument('--generated-at', required=False, help='ISO timestamp for the footer')
    render_cmd.add_argument('--brand', required=False, help='Brand name for the footer, overrides REPORT_BRAND')
    render_cmd.set_defaults(func=cmd_render)

    generate = sub.add_parser('generate', help='Generate report text from a questionnaire and render it')
    generate.add_argument('--payload', required=True, help='Questionnaire JSON file, or - for stdin')
    generate.add_argument('--output', required=True, help='Output PDF path')
    generate.set_defaults(func=cmd_generate)

    submit = sub.add_parser('submit', help='Store a form submission and send the confirmation')
    submit.add_argument('--payload', required=True, help='Submission JSON file, or - for stdin')
    submit.set_defaults(func=cmd_submit)

    test_email = sub.add_parser('test-email', help='Send a test email to the configured account')
    test_email.set_defaults(func=cmd_test_email)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command != 'serve':
        configure_logging(get_settings().log_level)
    return int(args.func(args))


if __name__ == '__main__':
    raise SystemExit(main())
