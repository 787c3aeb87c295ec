from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.document_attendance_repository import DocumentAttendanceRepository
from .attendance.factory import RollCallStrategyFactory
from .attendance.service import AttendanceService
from .complaints.document_complaint_repository import DocumentComplaintRepository
from .complaints.service import ComplaintService
from .core.constants import DEFAULT_COUNTRY_CODE, DEFAULT_GEOFENCE_RADIUS_METERS, DEFAULT_HOSTEL_TIMEZONE
from .database.connection import DBConfig, DatabaseConnection
from .database.memory_store import InMemoryDocumentStore
from .database.mysql_store import MySQLDocumentStore
from .database.store import DocumentStore
from .hostels.document_hostel_repository import DocumentHostelRepository
from .hostels.service import HostelService
from .identity.auth_provider import AuthProvider, SimulatedOtpProvider
from .identity.resolver import IdentityResolver
from .identity.tracker import AuthSessionTracker, AuthTrackerRegistry
from .leaves.document_leave_repository import DocumentLeaveRepository
from .leaves.service import LeaveService
from .notifications.expo_provider import EXPO_PUSH_URL, ExpoPushProvider
from .notifications.notifier import Notifier
from .notifications.outbox import NotificationOutbox, NotificationWorker
from .notifications.provider import NotificationProvider
from .tenancy.partition import TenantPartition
from .users.document_user_repository import DocumentResidentRepository, DocumentUserRepository
from .users.service import ResidentService


@dataclass(frozen=True)
class Container:
    store: DocumentStore
    partition: TenantPartition

    users_repo: DocumentUserRepository
    residents_repo: DocumentResidentRepository
    hostels_repo: DocumentHostelRepository
    attendance_repo: DocumentAttendanceRepository
    leaves_repo: DocumentLeaveRepository
    complaints_repo: DocumentComplaintRepository

    auth_provider: AuthProvider
    identity_resolver: IdentityResolver
    auth_trackers: AuthTrackerRegistry
    outbox: NotificationOutbox
    notification_worker: NotificationWorker
    notifier: Notifier

    hostel_service: HostelService
    resident_service: ResidentService
    attendance_service: AttendanceService
    leave_service: LeaveService
    complaint_service: ComplaintService

    def new_auth_tracker(self) -> AuthSessionTracker:
        return AuthSessionTracker(self.identity_resolver)


def _build_store(settings) -> DocumentStore:
    backend = str(getattr(settings, "STORE_BACKEND", "mysql")).lower()
    if backend == "memory":
        return InMemoryDocumentStore()
    if backend == "mysql":
        conn = DatabaseConnection.get_instance(DBConfig.from_dict(getattr(settings, "DB_CONFIG")))
        return MySQLDocumentStore(conn)
    raise ValueError(f"Unknown STORE_BACKEND: {backend!r}")


def build_container(
    *,
    settings,
    store: Optional[DocumentStore] = None,
    auth_provider: Optional[AuthProvider] = None,
    notification_provider: Optional[NotificationProvider] = None,
) -> Container:
    store = store or _build_store(settings)
    partition = TenantPartition(store)

    users_repo = DocumentUserRepository(store)
    residents_repo = DocumentResidentRepository(partition)
    hostels_repo = DocumentHostelRepository(store)
    attendance_repo = DocumentAttendanceRepository(partition)
    leaves_repo = DocumentLeaveRepository(partition)
    complaints_repo = DocumentComplaintRepository(partition)

    auth_provider = auth_provider or SimulatedOtpProvider(code=str(getattr(settings, "DEV_OTP_CODE", "123456")))
    identity_resolver = IdentityResolver(
        users_repo, country_code=getattr(settings, "DEFAULT_COUNTRY_CODE", DEFAULT_COUNTRY_CODE)
    )

    outbox = NotificationOutbox(maxsize=int(getattr(settings, "NOTIFICATION_QUEUE_SIZE", 1000)))
    notification_provider = notification_provider or ExpoPushProvider(
        url=getattr(settings, "EXPO_PUSH_URL", EXPO_PUSH_URL),
        timeout=float(getattr(settings, "NOTIFICATION_TIMEOUT_SECONDS", 10.0)),
    )
    notification_worker = NotificationWorker(outbox, notification_provider)
    notifier = Notifier(users_repo, outbox)

    hostel_service = HostelService(hostels_repo, users_repo)
    resident_service = ResidentService(residents_repo, users_repo)
    attendance_service = AttendanceService(
        attendance_repo,
        hostels_repo,
        residents_repo,
        strategy_factory=RollCallStrategyFactory(),
        radius_meters=float(getattr(settings, "GEOFENCE_RADIUS_METERS", DEFAULT_GEOFENCE_RADIUS_METERS)),
        timezone=getattr(settings, "HOSTEL_TIMEZONE", DEFAULT_HOSTEL_TIMEZONE),
        allow_bypass=bool(getattr(settings, "ATTENDANCE_ALLOW_BYPASS", False)),
    )
    leave_service = LeaveService(leaves_repo, notifier)
    complaint_service = ComplaintService(complaints_repo, notifier)

    return Container(
        store=store,
        partition=partition,
        users_repo=users_repo,
        residents_repo=residents_repo,
        hostels_repo=hostels_repo,
        attendance_repo=attendance_repo,
        leaves_repo=leaves_repo,
        complaints_repo=complaints_repo,
        auth_provider=auth_provider,
        identity_resolver=identity_resolver,
        auth_trackers=AuthTrackerRegistry(identity_resolver),
        outbox=outbox,
        notification_worker=notification_worker,
        notifier=notifier,
        hostel_service=hostel_service,
        resident_service=resident_service,
        attendance_service=attendance_service,
        leave_service=leave_service,
        complaint_service=complaint_service,
    )
