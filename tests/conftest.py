import pytest
from apscheduler.jobstores.base import JobLookupError

from stash import create_app
from stash.config import TestConfig
from stash.extensions import db
from stash.services.security import ensure_admin_user


@pytest.fixture(autouse=True)
def stub_page_titles(monkeypatch):
    monkeypatch.setattr(
        "stash.services.bookmarks.fetch_page_title",
        lambda url, **kwargs: f"Title of {url}",
    )


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.drop_all()
        db.create_all()
        ensure_admin_user(TestConfig.ADMIN_USERNAME, TestConfig.ADMIN_PASSWORD)
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth(client):
    response = client.post(
        "/api/auth/login",
        json={"username": TestConfig.ADMIN_USERNAME, "password": TestConfig.ADMIN_PASSWORD},
    )
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.get_json()['token']}"}


class _Job:
    def __init__(self, scheduler, job_id, func, args, run_date):
        self.scheduler = scheduler
        self.id = job_id
        self.func = func
        self.args = args
        self.run_date = run_date

    def remove(self):
        if self.scheduler.jobs.get(self.id) is not self:
            raise JobLookupError(self.id)
        del self.scheduler.jobs[self.id]


class ManualScheduler:
    running = True

    def __init__(self):
        self.jobs = {}

    def add_job(self, func, trigger, run_date=None, args=(), id=None, replace_existing=False):
        assert trigger == "date"
        job = _Job(self, id, func, tuple(args), run_date)
        self.jobs[id] = job
        return job

    def run(self, job_id):
        job = self.jobs.pop(job_id)
        return job.func(*job.args)

    def run_pending(self):
        while self.jobs:
            job_id = next(iter(self.jobs))
            self.run(job_id)


@pytest.fixture
def scheduler():
    return ManualScheduler()
