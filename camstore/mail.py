import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from html import escape

from flask import current_app


def mail_configured() -> bool:
    config = current_app.config
    return bool(config.get('MAIL_USERNAME') and config.get('MAIL_PASSWORD') and config.get('CONTACT_RECIPIENT'))


def render_contact_email(submission: dict) -> str:
    fields = {key: escape(str(submission.get(key, ''))) for key in ('name', 'email', 'subject', 'message')}
    return f"""
    <!DOCTYPE html>
    <html>
    <head>
        <style>
            body {{ font-family: Arial, sans-serif; line-height: 1.6; color: #333; }}
            .container {{ max-width: 600px; margin: 0 auto; padding: 20px; }}
            .header {{ background-color: #d32f2f; color: white; padding: 20px; text-align: center; }}
            .info-item {{ margin: 10px 0; padding: 10px; background-color: #f5f5f5; border-left: 4px solid #d32f2f; }}
            .message-box {{ background-color: #fff9e6; padding: 20px; border-left: 4px solid #ffc107; }}
        </style>
    </head>
    <body>
        <div class="container">
            <div class="header"><h1>New Contact Message</h1></div>
            <div class="info-item"><strong>Name:</strong> {fields['name']}</div>
            <div class="info-item"><strong>Email:</strong> {fields['email']}</div>
            <div class="info-item"><strong>Subject:</strong> {fields['subject']}</div>
            <div class="message-box">
                <p style="white-space: pre-wrap;">{fields['message']}</p>
            </div>
        </div>
    </body>
    </html>
    """


def send_contact_notification(submission: dict) -> bool:
    """Email the shop about a new contact message; returns False on failure."""
    if not mail_configured():
        return False
    config = current_app.config

    msg = MIMEMultipart('alternative')
    msg['Subject'] = f"New message from {submission['name']}: {submission['subject']}"
    msg['From'] = config['MAIL_USERNAME']
    msg['To'] = config['CONTACT_RECIPIENT']
    msg['Reply-To'] = submission['email']
    msg.attach(MIMEText(render_contact_email(submission), 'html'))

    try:
        with smtplib.SMTP(config['MAIL_SERVER'], config['MAIL_PORT'], timeout=10) as server:
            server.starttls()
            server.login(config['MAIL_USERNAME'], config['MAIL_PASSWORD'])
            server.send_message(msg)
    except (smtplib.SMTPException, OSError) as exc:
        current_app.logger.warning('Error sending contact notification for %s: %s', submission['email'], exc)
        return False

    current_app.logger.info('Contact notification sent for message from %s', submission['email'])
    return True
