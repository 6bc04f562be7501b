from . import create_app

app = create_app()

if __name__ == "__main__":
    host, port = app.config["HOST"], app.config["PORT"]
    app.logger.info("Backend server running on %s:%s", host, port)
    app.logger.info("Uploads directory: %s", app.config["UPLOAD_FOLDER"])
    app.logger.info("Certificate links point at %s", app.config["BASE_URL"])
    app.run(host=host, port=port)
