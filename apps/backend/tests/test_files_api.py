"""Tests for secure file URLs and downloads."""

import os
import time
from urllib.parse import parse_qs, urlparse

import pytest

from casebridge.services import FileTokenSigner

PDF_BYTES = b"%PDF-1.4 confidential brief" * 1000


@pytest.fixture
def upload(api_client, auth, client_user):
    async def post(case, name="brief.pdf", content=PDF_BYTES, mimetype="application/pdf"):
        response = await api_client.post(
            f"/cases/{case.id}/files",
            files=[("files", (name, content, mimetype))],
            headers=auth(client_user),
        )
        assert response.status_code == 201, response.text
        return response.json()[0]
    return post


@pytest.mark.asyncio
async def test_owner_downloads_through_secure_url(api_client, auth, open_case, client_user, upload):
    case_file = await upload(open_case)

    issued = await api_client.get(f"/files/{case_file['id']}/secure-url", headers=auth(client_user))

    assert issued.status_code == 200
    body = issued.json()
    url = urlparse(body["url"])
    assert (url.scheme, url.netloc, url.path) == ("http", "testserver", f"/files/secure/{case_file['id']}")
    assert parse_qs(url.query)["token"] == [body["token"]]
    assert body["expiresAt"] > time.time()

    download = await api_client.get(body["url"])
    assert download.status_code == 200
    assert download.content == PDF_BYTES
    assert download.headers["content-type"] == "application/pdf"
    assert download.headers["content-disposition"] == 'attachment; filename="brief.pdf"'


@pytest.mark.asyncio
async def test_hired_lawyer_may_download(api_client, auth, open_case, client_user, lawyer, submit, upload):
    case_file = await upload(open_case)
    quote = await submit(open_case, lawyer)

    before = await api_client.get(f"/files/{case_file['id']}/secure-url", headers=auth(lawyer))
    assert before.status_code == 403

    await api_client.post(
        f"/cases/{open_case.id}/accept-quote",
        json={"quoteId": quote["id"]},
        headers=auth(client_user),
    )

    after = await api_client.get(f"/files/{case_file['id']}/secure-url", headers=auth(lawyer))
    assert after.status_code == 200
    assert (await api_client.get(after.json()["url"])).status_code == 200


@pytest.mark.asyncio
async def test_other_parties_are_refused(api_client, auth, open_case, other_client, second_lawyer, upload):
    case_file = await upload(open_case)

    for user in (other_client, second_lawyer):
        response = await api_client.get(f"/files/{case_file['id']}/secure-url", headers=auth(user))
        assert response.status_code == 403


@pytest.mark.asyncio
async def test_secure_url_for_unknown_file(api_client, auth, client_user):
    response = await api_client.get("/files/missing/secure-url", headers=auth(client_user))

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_download_without_token(api_client, open_case, upload):
    case_file = await upload(open_case)

    assert (await api_client.get(f"/files/secure/{case_file['id']}")).status_code == 403
    assert (await api_client.get(f"/files/secure/{case_file['id']}", params={"token": "garbage"})).status_code == 403


@pytest.mark.asyncio
async def test_download_with_tampered_or_foreign_token(api_client, auth, open_case, client_user, upload):
    first = await upload(open_case, name="first.pdf")
    second = await upload(open_case, name="second.pdf")
    token = (await api_client.get(f"/files/{first['id']}/secure-url", headers=auth(client_user))).json()["token"]

    wrong_file = await api_client.get(f"/files/secure/{second['id']}", params={"token": token})
    assert wrong_file.status_code == 403

    file_id, user_id, expires_at, signature = token.split(".")
    extended = ".".join([file_id, user_id, str(int(expires_at) + 3600), signature])
    tampered = await api_client.get(f"/files/secure/{first['id']}", params={"token": extended})
    assert tampered.status_code == 403


@pytest.mark.asyncio
async def test_download_with_expired_token(api_client, fetch, open_case, client_user, upload):
    from casebridge.models import CaseFile

    case_file = await fetch(CaseFile, (await upload(open_case))["id"])
    past = FileTokenSigner(os.environ["FILE_TOKEN_SECRET"], clock=lambda: time.time() - 301)
    token = past.issue(case_file, client_user).token

    response = await api_client.get(f"/files/secure/{case_file.id}", params={"token": token})

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_download_when_file_missing_on_disk(api_client, auth, fetch, open_case, client_user, upload):
    from casebridge.models import CaseFile

    uploaded = await upload(open_case)
    os.remove((await fetch(CaseFile, uploaded["id"])).path)
    url = (await api_client.get(f"/files/{uploaded['id']}/secure-url", headers=auth(client_user))).json()["url"]

    response = await api_client.get(url)

    assert response.status_code == 404
