"""
Shared fixtures: an in-memory SQLite database per test and canned principals.
Run from the project root: python -m pytest tests -v  (or python -m unittest discover -s tests -t .)
"""
import unittest

from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from database import enable_sqlite_foreign_keys, init_db
from models import Role
from services import locks
from services.workflow import Principal, WorkflowGateway

APPLICANT = Principal(id="user-1", role=Role.APPLICANT)
OTHER_APPLICANT = Principal(id="user-2", role=Role.APPLICANT)
LOAN_MANAGER = Principal(id="lm-1", role=Role.LOAN_MANAGER)
LOAN_MANAGER_2 = Principal(id="lm-2", role=Role.LOAN_MANAGER)
MANAGER = Principal(id="mgr-1", role=Role.MANAGER)
MANAGER_2 = Principal(id="mgr-2", role=Role.MANAGER)
ADMIN = Principal(id="admin-1", role=Role.ADMIN)


class AsyncDatabaseTestCase(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        locks.reset()
        self.engine = create_async_engine(
            "sqlite+aiosqlite:///:memory:",
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
        enable_sqlite_foreign_keys(self.engine)
        await init_db(self.engine)
        self.Session = async_sessionmaker(self.engine, expire_on_commit=False, autoflush=False)
        self.session = self.Session()
        self.gateway = WorkflowGateway(self.session)
        self._extra_sessions = []

    async def asyncTearDown(self):
        for session in self._extra_sessions:
            await session.close()
        await self.session.close()
        await self.engine.dispose()

    async def upload(self, principal=APPLICANT, document_type="IDENTITY", loan_application_id=None):
        return await self.gateway.upload_document(
            principal,
            document_type=document_type,
            file_ref=f"blob://{principal.id}/{document_type.lower()}.pdf",
            file_size_bytes=250_000,
            content_type="application/pdf",
            loan_application_id=loan_application_id,
            file_name=f"{document_type.lower()}.pdf",
        )

    async def submitted_application(self, principal=APPLICANT, amount=1_000_000, term=120, purpose="Home Purchase"):
        """Upload one IDENTITY document and submit; the document is attached on submission."""
        doc = await self.upload(principal)
        app = await self.gateway.submit_loan_application(principal, amount, term, purpose)
        return app, doc

    async def verified_application(self, **kwargs):
        app, doc = await self.submitted_application(**kwargs)
        await self.gateway.review_document(LOAN_MANAGER, doc.id, "VERIFIED")
        app = await self.gateway.advance_application(LOAN_MANAGER, app.id, "VERIFIED")
        return app, doc

    def second_gateway(self):
        """A gateway on its own session, as a concurrent request would have."""
        session = self.Session()
        self._extra_sessions.append(session)
        return WorkflowGateway(session)
