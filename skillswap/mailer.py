"""
Transactional email for account verification and password reset.

The delivery backend is picked by ``MAIL_BACKEND``: ``sendgrid`` posts to
the SendGrid v3 API, ``ses`` goes through AWS SES, and ``log`` only writes
the message to the log (local development and tests).
"""
import logging

import boto3
import requests
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError
from flask import current_app
from markupsafe import escape

logger = logging.getLogger(__name__)

SENDGRID_URL = 'https://api.sendgrid.com/v3/mail/send'


class MailError(Exception):
    """Raised when an email could not be handed to the delivery backend."""


VERIFY_TEMPLATE = """
<html>
  <body style="font-family: Arial, sans-serif; line-height: 1.6; background:#f9f9f9; padding:20px; color:#222;">
    <div style="max-width:520px; margin:auto; padding:25px; background:#ffffff; border-radius:8px;">
      <h2 style="color:#007BFF;">Welcome to SkillSwap!</h2>
      <p>Hi {first_name},</p>
      <p>Click the button below to verify your account:</p>
      <p style="text-align:center;">
        <a href="{url}" style="display:inline-block; padding:12px 24px; background-color:#007BFF;
           color:#ffffff; text-decoration:none; font-weight:600; border-radius:5px;">Verify My Account</a>
      </p>
      <p>If the button doesn't work, copy and paste this link into your browser:</p>
      <p style="word-break:break-all;"><a href="{url}">{url}</a></p>
      <hr style="border:none; border-top:1px solid #ddd; margin:25px 0;">
      <p style="font-size:13px; color:#555;">
        This email was sent by <strong>SkillSwap</strong>. If you didn't sign up for an account, please ignore this message.
      </p>
    </div>
  </body>
</html>
"""

RESET_TEMPLATE = """
<html>
  <body style="font-family: Arial, sans-serif; line-height:1.6;">
    <h2>Password Reset Request</h2>
    <p>Click below to reset your password:</p>
    <a href="{url}" style="background-color:#4CAF50;color:white;padding:10px 20px;
       text-decoration:none;border-radius:5px;">Reset Password</a>
    <p>If the button doesn't work, copy this link into your browser:</p>
    <p><a href="{url}">{url}</a></p>
    <p>This link expires in {minutes} minutes.</p>
  </body>
</html>
"""


def send_email(to, subject, html):
    backend = current_app.config.get('MAIL_BACKEND', 'log')
    if backend == 'sendgrid':
        _send_with_sendgrid(to, subject, html)
    elif backend == 'ses':
        _send_with_ses(to, subject, html)
    elif backend == 'log':
        logger.info("Email to %s: %s", to, subject)
        logger.debug("Email body:\n%s", html)
    else:
        raise MailError(f"Unknown mail backend: {backend}")


def _send_with_sendgrid(to, subject, html):
    config = current_app.config
    if not config.get('SENDGRID_API_KEY'):
        raise MailError('SENDGRID_API_KEY is not configured')

    payload = {
        'personalizations': [{'to': [{'email': to}]}],
        'from': {'email': config['MAIL_FROM'], 'name': config['MAIL_FROM_NAME']},
        'subject': subject,
        'content': [{'type': 'text/html', 'value': html}],
    }
    try:
        response = requests.post(
            SENDGRID_URL,
            json=payload,
            headers={'Authorization': f"Bearer {config['SENDGRID_API_KEY']}"},
            timeout=10,
        )
        response.raise_for_status()
    except requests.RequestException as e:
        logger.error("SendGrid error: %s", e)
        raise MailError(str(e)) from e


def _send_with_ses(to, subject, html):
    config = current_app.config
    ses = boto3.client(
        'ses',
        aws_access_key_id=config.get('AWS_ACCESS_KEY'),
        aws_secret_access_key=config.get('AWS_SECRET_KEY'),
        region_name=config.get('AWS_REGION'),
        config=BotoConfig(connect_timeout=5, read_timeout=10, retries={'max_attempts': 3}),
    )
    try:
        ses.send_email(
            Source=f"{config['MAIL_FROM_NAME']} <{config['MAIL_FROM']}>",
            Destination={'ToAddresses': [to]},
            Message={
                'Subject': {'Data': subject},
                'Body': {'Html': {'Data': html}},
            },
        )
    except (BotoCoreError, ClientError) as e:
        logger.error("SES error: %s", e)
        raise MailError(str(e)) from e


def send_verification_email(user):
    url = f"{current_app.config['BASE_URL']}/confirm-email/{user.verification_token}"
    html = VERIFY_TEMPLATE.format(first_name=escape(user.first_name), url=url)
    send_email(user.login, 'Verify your SkillSwap account', html)
    logger.info("Verification email sent to %s", user.login)


def send_reset_email(user):
    url = f"{current_app.config['BASE_URL']}/reset-password/{user.reset_token}"
    html = RESET_TEMPLATE.format(url=url, minutes=current_app.config['RESET_TOKEN_MINUTES'])
    send_email(user.login, 'Reset your SkillSwap password', html)
    logger.info("Password reset email sent to %s", user.login)
