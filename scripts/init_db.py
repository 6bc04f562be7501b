from railtrack import create_app, db
from railtrack.models import Certificate

app = create_app()

# Clears the certificate register.  Generated PDFs in the upload folder are left alone.
with app.app_context():
    db.drop_all()
    db.create_all()
    print(f"Database initialized ({Certificate.query.count()} certificates registered).")
