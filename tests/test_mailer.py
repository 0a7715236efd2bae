import pytest
import requests
from botocore.exceptions import ClientError

from skillswap import mailer
from skillswap.mailer import MailError, send_email


class FakeResponse:
    def __init__(self, status_code):
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f'{self.status_code} error')


def test_log_backend_sends_nothing(app, monkeypatch):
    monkeypatch.setattr(mailer.requests, 'post', lambda *a, **kw: pytest.fail('network used'))
    send_email('ada@example.com', 'Hello', '<p>hi</p>')


def test_unknown_backend(app):
    app.config['MAIL_BACKEND'] = 'pigeon'
    with pytest.raises(MailError):
        send_email('ada@example.com', 'Hello', '<p>hi</p>')


def test_sendgrid_backend_posts_message(app, monkeypatch):
    app.config.update(MAIL_BACKEND='sendgrid', SENDGRID_API_KEY='sg-key', MAIL_FROM='noreply@example.com')
    calls = []

    def fake_post(url, json, headers, timeout):
        calls.append({'url': url, 'json': json, 'headers': headers})
        return FakeResponse(202)

    monkeypatch.setattr(mailer.requests, 'post', fake_post)
    send_email('ada@example.com', 'Hello', '<p>hi</p>')

    assert calls[0]['url'] == mailer.SENDGRID_URL
    assert calls[0]['headers']['Authorization'] == 'Bearer sg-key'
    payload = calls[0]['json']
    assert payload['personalizations'] == [{'to': [{'email': 'ada@example.com'}]}]
    assert payload['from']['email'] == 'noreply@example.com'
    assert payload['content'][0] == {'type': 'text/html', 'value': '<p>hi</p>'}


def test_sendgrid_http_error_raises_mail_error(app, monkeypatch):
    app.config.update(MAIL_BACKEND='sendgrid', SENDGRID_API_KEY='sg-key')
    monkeypatch.setattr(mailer.requests, 'post', lambda *a, **kw: FakeResponse(401))
    with pytest.raises(MailError):
        send_email('ada@example.com', 'Hello', '<p>hi</p>')


class FakeSES:
    def __init__(self, error=None):
        self.sent = []
        self.error = error

    def send_email(self, **kwargs):
        if self.error:
            raise self.error
        self.sent.append(kwargs)


def test_ses_backend(app, monkeypatch):
    app.config.update(MAIL_BACKEND='ses', MAIL_FROM='noreply@example.com', MAIL_FROM_NAME='SkillSwap')
    ses = FakeSES()
    monkeypatch.setattr(mailer.boto3, 'client', lambda service, **kwargs: ses)

    send_email('ada@example.com', 'Hello', '<p>hi</p>')

    sent = ses.sent[0]
    assert sent['Source'] == 'SkillSwap <noreply@example.com>'
    assert sent['Destination'] == {'ToAddresses': ['ada@example.com']}
    assert sent['Message']['Body']['Html']['Data'] == '<p>hi</p>'


def test_ses_client_error_raises_mail_error(app, monkeypatch):
    app.config['MAIL_BACKEND'] = 'ses'
    error = ClientError({'Error': {'Code': 'MessageRejected', 'Message': 'nope'}}, 'SendEmail')
    monkeypatch.setattr(mailer.boto3, 'client', lambda service, **kwargs: FakeSES(error))
    with pytest.raises(MailError):
        send_email('ada@example.com', 'Hello', '<p>hi</p>')


def test_verification_email_escapes_name(app, make_user, sent_emails):
    user = make_user(first_name='<b>Ada</b>', verified=False)
    user.verification_token = 'abc123'

    mailer.send_verification_email(user)

    html = sent_emails[0]['html']
    assert '&lt;b&gt;Ada&lt;/b&gt;' in html
    assert 'http://skillswap.test/confirm-email/abc123' in html
