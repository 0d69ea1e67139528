import hmac
import logging
import re

from errors import AuthError, ConflictError, NotFoundError, ValidationError
from store import NIL_UUID, NotEqual

log = logging.getLogger(__name__)

UUID_RE = re.compile(r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}", re.IGNORECASE)

TREE_FIELDS = ("name", "species", "description", "image_url", "css_style", "student_id")


def validate_tree_id(tree_id):
    if not isinstance(tree_id, str) or not UUID_RE.fullmatch(tree_id):
        raise ValidationError("Invalid tree ID format")
    return tree_id


# --- Ingestion -------------------------------------------------------

class TreeIngestion:
    """Adds a submitted tree, diverting repeats of a dedup key to ``duplicates``.

    The ``trees`` table carries a unique constraint on (name, species,
    student_id), so the insert itself decides which submission is canonical.
    A conflicting insert is answered by looking up the canonical tree and
    recording the submission as its duplicate.
    """

    def __init__(self, store):
        self.store = store

    def submit(self, submission):
        record = {field: submission.get(field) for field in TREE_FIELDS}
        try:
            return self.store.insert("trees", record)
        except ConflictError:
            existing = self.store.select(
                "trees",
                name=record["name"],
                species=record["species"],
                student_id=record["student_id"],
            )
            if not existing:
                # constraint other than the dedup key
                raise
        canonical = existing[0]
        log.info("Tree %r by %s duplicates %s", record["name"], record["student_id"], canonical["id"])
        return self.store.insert("duplicates", dict(record, tree_id=canonical["id"]))


# --- Ratings ---------------------------------------------------------

class RatingService:

    def __init__(self, store):
        self.store = store

    def rate(self, tree_id, student_id, rating):
        # no existence check on tree_id; the store decides
        return self.store.insert("ratings", {
            "tree_id": tree_id,
            "student_id": student_id,
            "rating": rating,
        })


# --- Admin purge -----------------------------------------------------

class AdminPurge:

    def __init__(self, store, admin_key):
        self.store = store
        self.admin_key = admin_key

    def check_key(self, supplied):
        if not self.admin_key or supplied is None:
            raise AuthError()
        if not hmac.compare_digest(supplied.encode(), self.admin_key.encode()):
            raise AuthError()

    def purge_all(self, supplied_key):
        self.check_key(supplied_key)
        # dependents first
        for table in ("ratings", "duplicates", "trees"):
            self.store.delete(table, id=NotEqual(NIL_UUID))
        log.info("Purged all trees")

    def purge_one(self, supplied_key, tree_id):
        self.check_key(supplied_key)
        validate_tree_id(tree_id)
        try:
            self.store.select_one("trees", id=tree_id)
        except NotFoundError:
            raise NotFoundError("Tree not found") from None
        self.store.delete("ratings", tree_id=tree_id)
        self.store.delete("duplicates", tree_id=tree_id)
        self.store.delete("trees", id=tree_id)
        log.info("Deleted tree with ID: %s", tree_id)


# --- Queries ---------------------------------------------------------

class TreeQuery:

    def __init__(self, store):
        self.store = store

    def list_trees(self):
        return self.store.select("trees", embed=("ratings",))

    def get_tree(self, tree_id):
        validate_tree_id(tree_id)
        try:
            return self.store.select_one("trees", embed=("ratings",), id=tree_id)
        except NotFoundError:
            raise NotFoundError("Tree not found") from None
