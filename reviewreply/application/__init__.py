# Application Layer
# =================
# Review store, reply controllers and the session coordinator.
# Orchestration only: talks to the outside world through the abstract
# ReviewSource / ReplyGenerator interfaces of the infrastructure layer.

from .processing_lock import ProcessingLock
from .review_store import ReviewStore, require_connected
from .reply_controller import ReplyController
from .batch_controller import BatchDraftController, DraftAllResult, ItemOutcome, Outcome
from .composer import ReplyComposer
from .session import SessionCoordinator
from .engine import ReviewReplyEngine, create_engine
