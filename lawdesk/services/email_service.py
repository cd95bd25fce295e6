"""
Email Service for Lawdesk

Sends notification emails over SMTP. Bodies are rendered from the Jinja2
templates in ``lawdesk/templates/emails`` with inline fallbacks when a
template file is missing.
"""

import smtplib
import ssl
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from email.utils import formatdate, make_msgid
from typing import List, Dict, Any
import logging
from pathlib import Path
import jinja2

from ..config.settings import settings

logger = logging.getLogger(__name__)

CASE_ASSIGNED_TEMPLATE = "case_assigned.html"
DAILY_SUMMARY_TEMPLATE = "daily_summary.html"


class EmailServiceError(Exception):
    """Custom exception for email service errors"""
    pass


class EmailTemplate:
    """Email template handler using Jinja2"""

    def __init__(self, template_dir: str = None):
        if template_dir is None:
            # __file__ = lawdesk/services/email_service.py
            # parents[0]=services, [1]=lawdesk -> lawdesk/templates/emails
            template_dir = Path(__file__).parents[1] / "templates" / "emails"

        self.template_dir = Path(template_dir)
        if self.template_dir.exists():
            self.env = jinja2.Environment(
                loader=jinja2.FileSystemLoader(str(self.template_dir)),
                autoescape=jinja2.select_autoescape(['html', 'xml'])
            )
        else:
            logger.warning(
                f"Template directory {self.template_dir} not found. Using string templates.")
            self.env = None

    def render(self, template_name: str, context: Dict[str, Any]) -> str:
        """Render email template with context"""
        if self.env:
            try:
                template = self.env.get_template(template_name)
                return template.render(**context)
            except jinja2.TemplateNotFound:
                logger.error(f"Template {template_name} not found")
        return self._get_fallback_template(template_name, context)

    def _get_fallback_template(self, template_name: str, context: Dict[str, Any]) -> str:
        """Plain fallback bodies when template files are not available"""
        fallback_templates = {
            CASE_ASSIGNED_TEMPLATE: """
            <html><body>
                <h1>{{ case_type }} Assigned</h1>
                <p>Hello {{ user_name }}, you have been assigned case
                <strong>{{ case_number }}</strong>: {{ case_title }}.</p>
                {% if assigned_by %}<p>Assigned by {{ assigned_by }}</p>{% endif %}
                <p><a href="{{ case_url }}">View Case Details</a></p>
                <p>{{ firm_name }} Case Management System</p>
            </body></html>
            """,
            DAILY_SUMMARY_TEMPLATE: """
            <html><body>
                <h2>Daily Summary for {{ user_name }}</h2>
                <p>Date: {{ summary_date }}</p>
                <p>Today's events: {{ today_events|length }},
                tomorrow's events: {{ tomorrow_events|length }},
                pending tasks: {{ pending_tasks|length }}</p>
                <p><a href="{{ dashboard_url }}">View Dashboard</a></p>
            </body></html>
            """,
        }

        template_content = fallback_templates.get(
            template_name, f"<p>Email content for {template_name}</p>")
        env = jinja2.Environment(autoescape=True)
        return env.from_string(template_content).render(**context)


class EmailService:
    """SMTP email service"""

    def __init__(self):
        self.smtp_server = settings.smtp_server
        self.smtp_port = settings.smtp_port
        self.smtp_username = settings.smtp_username
        self.smtp_password = settings.smtp_password
        self.smtp_use_tls = settings.smtp_use_tls
        self.from_email = settings.from_email
        self.template_handler = EmailTemplate()

        self._validate_config()

    def _validate_config(self):
        """Validate email configuration"""
        required_settings = [
            ('smtp_server', self.smtp_server),
            ('smtp_port', self.smtp_port),
            ('smtp_username', self.smtp_username),
            ('smtp_password', self.smtp_password),
        ]

        missing = [name for name, value in required_settings if not value]
        if missing:
            raise EmailServiceError(
                f"Missing required email settings: {', '.join(missing)}")

        logger.info(
            f"Email service configured with server: {self.smtp_server}:{self.smtp_port}")

    def send_email(
        self,
        to_emails: List[str],
        subject: str,
        body_html: str,
        body_text: str = None
    ) -> str:
        """
        Send an email over SMTP in a single attempt

        Args:
            to_emails: List of recipient email addresses
            subject: Email subject
            body_html: HTML email body
            body_text: Plain text email body (optional)

        Returns:
            str: The Message-ID of the sent email

        Raises:
            EmailServiceError: If email sending fails
        """
        try:
            message_id = make_msgid(domain=self.from_email.split('@')[-1])

            msg = MIMEMultipart('alternative')
            msg['Subject'] = subject
            msg['From'] = self.from_email
            msg['To'] = ', '.join(to_emails)
            msg['Date'] = formatdate(localtime=True)
            msg['Message-ID'] = message_id

            if body_text:
                msg.attach(MIMEText(body_text, 'plain'))
            msg.attach(MIMEText(body_html, 'html'))

            context = ssl.create_default_context()

            with smtplib.SMTP(self.smtp_server, self.smtp_port) as server:
                if self.smtp_use_tls:
                    server.starttls(context=context)

                server.login(self.smtp_username, self.smtp_password)
                server.sendmail(self.from_email, to_emails, msg.as_string())

            logger.info(f"Email sent successfully to {', '.join(to_emails)}")
            return message_id

        except Exception as e:
            logger.error(f"Failed to send email: {e}")
            raise EmailServiceError(f"Failed to send email: {e}")

    def send_template_email(
        self,
        to_emails: List[str],
        template_name: str,
        context: Dict[str, Any],
        subject: str = None
    ) -> str:
        """
        Send email using template

        Args:
            to_emails: List of recipient email addresses
            template_name: Template filename (e.g., 'case_assigned.html')
            context: Template context variables
            subject: Email subject (if not in context)

        Returns:
            str: The Message-ID of the sent email
        """
        try:
            body_html = self.template_handler.render(template_name, context)
            email_subject = subject or context.get(
                'subject', f'{settings.app_name} Notification')
            return self.send_email(to_emails, email_subject, body_html)

        except Exception as e:
            logger.error(f"Failed to send template email {template_name}: {e}")
            raise EmailServiceError(f"Failed to send template email: {e}")


# Global email service instance - only create when needed
email_service = None


def get_email_service():
    """Get email service instance, creating it lazily"""
    global email_service
    if email_service is None:
        email_service = EmailService()
    return email_service
