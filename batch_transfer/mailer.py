"""
メール通知モジュール

通知内容を MIME メッセージに変換し、SMTP で送信します。
"""

import logging
import mimetypes
import smtplib
from email.message import EmailMessage
from typing import Callable

from .exceptions import TransportError
from .models import NotificationEnvelope, Priority


class SmtpMailer:
    """SMTPで通知を送信するクラス"""

    def __init__(self, settings, smtp_factory: Callable[..., smtplib.SMTP] = smtplib.SMTP):
        """
        SmtpMailerを初期化

        Args:
            settings: SMTP設定（config.SmtpSettings）
            smtp_factory: SMTP接続を作成する関数
        """
        self.settings = settings
        self._smtp_factory = smtp_factory
        self.logger = logging.getLogger(__name__)

    def build_message(self, envelope: NotificationEnvelope) -> EmailMessage:
        """
        通知内容からメールメッセージを作成

        Args:
            envelope: 通知内容

        Returns:
            送信用のメッセージ

        Raises:
            TransportError: 添付ファイルを読み込めない場合
        """
        message = EmailMessage()
        message['Subject'] = envelope.subject
        message['From'] = self.settings.sender
        message['To'] = ', '.join(envelope.to)
        if envelope.priority is Priority.HIGH:
            message['X-Priority'] = '1'
            message['Importance'] = 'High'
        message.set_content("This message requires an HTML capable mail client.")
        message.add_alternative(envelope.body, subtype='html')

        for path in envelope.attachments:
            content_type, _ = mimetypes.guess_type(str(path))
            maintype, subtype = (content_type or 'application/octet-stream').split('/', 1)
            try:
                data = path.read_bytes()
            except OSError as e:
                raise TransportError(f"添付ファイル読み込み失敗: {path} - {e}") from e
            message.add_attachment(data, maintype=maintype, subtype=subtype,
                                   filename=path.name)
        return message

    def send(self, envelope: NotificationEnvelope) -> None:
        """
        通知を送信

        Args:
            envelope: 通知内容

        Raises:
            TransportError: 送信に失敗した場合
        """
        if not envelope.to and not envelope.bcc:
            raise TransportError("通知の宛先が指定されていません")

        message = self.build_message(envelope)
        recipients = list(envelope.to) + list(envelope.bcc)

        try:
            with self._smtp_factory(self.settings.host, self.settings.port, timeout=60) as smtp:
                if self.settings.use_tls:
                    smtp.starttls()
                if self.settings.username:
                    smtp.login(self.settings.username, self.settings.password or '')
                smtp.send_message(message, to_addrs=recipients)
        except (smtplib.SMTPException, OSError) as e:
            raise TransportError(f"メール送信失敗: {self.settings.host} - {e}") from e

        self.logger.info(f"通知メール送信: {envelope.subject} -> {', '.join(recipients)}")
