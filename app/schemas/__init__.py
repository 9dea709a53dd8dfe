"""Schema modules."""
from app.schemas.auth import RegisterRequest, TokenResponse, RefreshTokenRequest, RefreshTokenResponse
from app.schemas.user import UserCreate, UserSummary, UserResponse
from app.schemas.project import ProjectCreate, ProjectUpdate, ProjectResponse, ProjectDetailResponse
from app.schemas.comment import CommentCreate, CommentResponse
from app.schemas.history import HistoryResponse, ActivitySummary
from app.schemas.task import TaskCreate, TaskUpdate, TaskResponse, TaskDetailResponse
from app.schemas.notification import NotificationResponse, MarkAllReadResponse, UnreadCountResponse
from app.schemas.system_event import SystemEventResponse, SweepResultResponse, CronInitResponse
from app.schemas.common import DeletedResponse
