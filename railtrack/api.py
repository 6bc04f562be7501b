from flask import Blueprint, request, jsonify, current_app
from sqlalchemy.exc import SQLAlchemyError

from . import db
from .errors import RailTrackError, ValidationError
from .models import Certificate
from .qr_utils import encode_data_url
from .records import ItemRecord
from .routes import iso_now

api = Blueprint("api", __name__)


def failure(error, status):
    return jsonify({"success": False, "error": str(error)}), status


def register_certificate(record, descriptor):
    """Record a stored certificate for the listing endpoint.

    The PDF is already on disk and linkable at this point, so a register
    failure is logged rather than reported as a failed generation.
    """

    try:
        db.session.add(Certificate(
            filename=descriptor.artifact_name,
            document_id=descriptor.timestamp,
            vendor_name=record.vendor_name,
            lot_number=record.lot_number,
            item_type=record.item_type,
            full_url=descriptor.absolute_url,
        ))
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.warning("Could not register certificate %s: %s", descriptor.artifact_name, e)


@api.post("/generate-pdf")
def generate_pdf():
    compositor = current_app.extensions["railtrack"]["compositor"]
    try:
        record = ItemRecord.from_json(request.get_json(silent=True))
        descriptor = compositor.compose(record)
    except ValidationError as e:
        current_app.logger.info("Rejected certificate request: %s", e)
        return failure(e, e.status_code)
    except RailTrackError as e:
        current_app.logger.error("Error generating PDF: %s", e)
        return failure(e, 500)
    except Exception as e:
        current_app.logger.exception("Error generating PDF")
        return failure(e, 500)

    register_certificate(record, descriptor)
    return jsonify(descriptor.to_json())


@api.post("/generate-qr")
def generate_qr():
    data = request.get_json(silent=True) or {}
    pdf_url = data.get("pdfUrl")
    if not isinstance(pdf_url, str) or not pdf_url.strip():
        return failure("pdfUrl required", 400)
    try:
        qr_code = encode_data_url(pdf_url, width=300, margin=2, dark="#000000", light="#FFFFFF")
    except RailTrackError as e:
        current_app.logger.error("Error generating QR code: %s", e)
        return failure(e, 500)
    except Exception as e:
        current_app.logger.exception("Error generating QR code")
        return failure(e, 500)
    return jsonify({"success": True, "qrCode": qr_code, "pdfUrl": pdf_url})


@api.get("/certificates")
def list_certificates():
    try:
        page = max(int(request.args.get("page", "1")), 1)
        per = min(max(int(request.args.get("per", "50")), 1), 200)
    except ValueError:
        return failure("page and per must be integers", 400)
    q = Certificate.query.order_by(Certificate.document_id.desc()).offset((page-1)*per).limit(per)
    return jsonify({"success": True, "rows": [c.to_json() for c in q]})


@api.get("/health")
def health():
    cfg = current_app.config
    return jsonify({
        "status": "OK",
        "timestamp": iso_now(),
        "environment": cfg["APP_ENV"],
        "port": cfg["PORT"],
        "host": cfg["HOST"],
    })
