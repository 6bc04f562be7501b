from . import db
from sqlalchemy import func


class Certificate(db.Model):
    __tablename__ = "certificates"
    id = db.Column(db.Integer, primary_key=True)
    filename = db.Column(db.String(255), unique=True, nullable=False, index=True)
    document_id = db.Column(db.BigInteger, nullable=False)
    vendor_name = db.Column(db.String, nullable=False)
    lot_number = db.Column(db.String, nullable=False, index=True)
    item_type = db.Column(db.String, nullable=False)
    full_url = db.Column(db.String(1024), nullable=False)
    created_at = db.Column(db.DateTime, default=func.now())

    def to_json(self):
        return {
            "id": self.id,
            "filename": self.filename,
            "documentId": self.document_id,
            "vendorName": self.vendor_name,
            "lotNumber": self.lot_number,
            "itemType": self.item_type,
            "fullUrl": self.full_url,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
