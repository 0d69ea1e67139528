import logging
from dataclasses import dataclass
from flask import Blueprint, Flask, current_app, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException
from config import Settings
from errors import ApiError, ValidationError
from media import MediaStore
from models import db
from store import RecordStore
from workflows import AdminPurge, RatingService, TreeIngestion, TreeQuery

api = Blueprint("api", __name__)


@dataclass
class Gallery:
    ingestion: TreeIngestion
    ratings: RatingService
    purge: AdminPurge
    query: TreeQuery
    media: MediaStore


def gallery():
    return current_app.extensions["tree_gallery"]


def json_body():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}

# --- Trees ----------------------------------------------------------

@api.route("/trees", methods=["POST"])
def add_tree():
    data = json_body()
    submission = dict(data, image_url=data.get("image"))
    row = gallery().ingestion.submit(submission)
    current_app.logger.info("Stored %s %s", "duplicate" if "tree_id" in row else "tree", row["id"])
    return jsonify(row), 201


@api.route("/trees", methods=["GET"])
def list_trees():
    return jsonify(gallery().query.list_trees())


@api.route("/trees/<tree_id>", methods=["GET"])
def get_tree(tree_id):
    return jsonify(gallery().query.get_tree(tree_id))


@api.route("/trees", methods=["DELETE"])
def delete_all_trees():
    gallery().purge.purge_all(request.headers.get("x-admin-key"))
    return "", 204


@api.route("/trees/<tree_id>", methods=["DELETE"])
def delete_tree(tree_id):
    gallery().purge.purge_one(request.headers.get("x-admin-key"), tree_id)
    return "", 204

# --- Ratings --------------------------------------------------------

@api.route("/ratings", methods=["POST"])
def rate_tree():
    data = json_body()
    row = gallery().ratings.rate(data.get("tree_id"), data.get("student_id"), data.get("rating"))
    return jsonify(row), 201

# --- Images ---------------------------------------------------------

@api.route("/upload-image", methods=["POST"])
def upload_image():
    image = request.files.get("image")
    if image is None:
        raise ValidationError("No image file provided")
    url = gallery().media.store(image.stream, image.filename, image.mimetype)
    return jsonify({"url": url})

# --- Errors ---------------------------------------------------------

def handle_api_error(e):
    if e.status >= 500:
        current_app.logger.error("Error handling %s %s: %s", request.method, request.path, e.message)
    return jsonify({"error": e.message}), e.status


def handle_http_error(e):
    return jsonify({"error": e.description}), e.code

# -------------------------------------------------------------------

def create_app(settings=None, media=None):
    settings = settings or Settings.from_env()

    app = Flask(__name__)
    app.config.update(
        SQLALCHEMY_DATABASE_URI=settings.database_url,
        SQLALCHEMY_TRACK_MODIFICATIONS=False,
        MAX_CONTENT_LENGTH=10 * 1024 * 1024,
    )
    app.logger.setLevel(settings.log_level)
    logging.basicConfig(level=settings.log_level)
    db.init_app(app)
    CORS(app, origins=settings.cors_origin_list)

    store = RecordStore(db)
    app.extensions["tree_gallery"] = Gallery(
        ingestion=TreeIngestion(store),
        ratings=RatingService(store),
        purge=AdminPurge(store, settings.admin_key),
        query=TreeQuery(store),
        media=media or MediaStore.from_settings(settings),
    )
    app.register_blueprint(api)
    app.register_error_handler(ApiError, handle_api_error)
    app.register_error_handler(HTTPException, handle_http_error)
    return app


if __name__ == "__main__":
    settings = Settings.from_env()
    app = create_app(settings)
    with app.app_context():
        try:
            db.create_all()
            app.logger.info("Database tables created (if they didn't exist).")
        except Exception as e:
            app.logger.error("Error during initial db setup: %s", e)
    app.run(host="0.0.0.0", port=settings.port, debug=settings.debug)
