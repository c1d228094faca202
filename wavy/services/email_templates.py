# wavy/services/email_templates.py
# HTML bodies for every outbound email. Texts are in French, as shown to the users.

from html import escape

_BUTTON = (
    'display:inline-block;background:{color};color:white;padding:12px 24px;'
    'text-decoration:none;border-radius:6px;margin:16px 0;'
)


def _button(url: str, label: str, color: str = "#4f46e5") -> str:
    return f'<a href="{escape(url)}" style="{_BUTTON.format(color=color)}">{label}</a>'


def otp_email(code: str, company: str, ttl_minutes: int) -> tuple[str, str]:
    subject = f"Votre code de vérification {company}"
    html = f"""
      <div style="font-family: sans-serif; max-width: 480px; margin: 0 auto; padding: 24px;">
        <h2>Code de vérification</h2>
        <p>Votre code de connexion à {escape(company)} :</p>
        <div style="font-size: 36px; font-weight: bold; letter-spacing: 8px; text-align: center;
                    background: #f5f5f5; padding: 24px; border-radius: 8px; margin: 24px 0;">
          {escape(code)}
        </div>
        <p style="color: #666;">Ce code est valable {ttl_minutes} minutes.</p>
        <p style="color: #999; font-size: 12px;">Si vous n'avez pas demandé ce code, ignorez cet email.</p>
      </div>
    """
    return subject, html


def password_reset_email(reset_url: str, company: str) -> tuple[str, str]:
    subject = f"Réinitialisation de mot de passe - {company}"
    html = f"""
      <div style="font-family: sans-serif; max-width: 480px; margin: 0 auto; padding: 24px;">
        <h2>Réinitialisation de mot de passe</h2>
        <p>Cliquez sur le lien ci-dessous pour réinitialiser votre mot de passe :</p>
        {_button(reset_url, "Réinitialiser mon mot de passe")}
        <p style="color:#666;font-size:12px;">Ce lien expire dans 1 heure.</p>
      </div>
    """
    return subject, html


def invitation_email(invite_url: str, first_name: str | None, company: str, ttl_days: int) -> tuple[str, str]:
    subject = f"Invitation à rejoindre l'espace CRA - {company}"
    html = f"""
      <div style="font-family: sans-serif; max-width: 480px; margin: 0 auto; padding: 24px;">
        <h2>Bienvenue chez {escape(company)}</h2>
        <p>Bonjour {escape(first_name or '')},</p>
        <p>Vous avez été invité(e) à rejoindre l'espace CRA de {escape(company)}.</p>
        {_button(invite_url, "Créer mon compte")}
        <p style="color:#666;font-size:12px;">Ce lien expire dans {ttl_days} jours.</p>
      </div>
    """
    return subject, html


def _cra_summary(user_name: str, month_label: str, client_name: str | None,
                 worked_days, absent_days, comment: str | None, accent: str) -> str:
    comment_line = f"<p><strong>Commentaire :</strong> {escape(comment)}</p>" if comment else ""
    return f"""
      <div style="background: white; padding: 20px; border-radius: 8px; margin: 20px 0; border-left: 4px solid {accent};">
        <p><strong>Consultant :</strong> {escape(user_name)}</p>
        <p><strong>Période :</strong> {escape(month_label)}</p>
        <p><strong>Client :</strong> {escape(client_name or 'Non spécifié')}</p>
        <p><strong>Jours travaillés :</strong> {worked_days}</p>
        <p><strong>Jours d'absence :</strong> {absent_days}</p>
        {comment_line}
      </div>
    """


def cra_validation_request_email(
    *, user_name: str, month_label: str, client_name: str | None, worked_days, absent_days,
    comment: str | None, approve_url: str, reject_url: str, ttl_days: int,
) -> tuple[str, str]:
    subject = f"Validation du Compte-Rendu d'Activité - {month_label}"
    summary = _cra_summary(user_name, month_label, client_name, worked_days, absent_days, comment, "#667eea")
    html = f"""
      <div style="font-family: sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
        <div style="background: linear-gradient(135deg, #667eea, #764ba2); padding: 30px; border-radius: 10px 10px 0 0; text-align: center;">
          <h1 style="color: white; margin: 0;">Validation du CRA</h1>
        </div>
        <div style="background: #f9f9f9; padding: 30px; border-radius: 0 0 10px 10px;">
          <p>Bonjour,</p>
          <p>Vous êtes invité(e) à valider le Compte-Rendu d'Activité suivant :</p>
          {summary}
          <div style="text-align: center; margin: 30px 0;">
            {_button(approve_url, "Approuver", "#22c55e")}
            {_button(reject_url, "Rejeter", "#ef4444")}
          </div>
          <p style="color:#666;font-size:14px;">Ce lien expire dans {ttl_days} jours.</p>
        </div>
      </div>
    """
    return subject, html


def cra_approved_email(
    *, user_name: str, month_label: str, client_name: str | None, worked_days, absent_days,
) -> tuple[str, str]:
    subject = f"CRA Approuvé - {user_name} - {month_label}"
    summary = _cra_summary(user_name, month_label, client_name, worked_days, absent_days, None, "#22c55e")
    html = f"""
      <div style="font-family: sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
        <div style="background: linear-gradient(135deg, #22c55e, #16a34a); padding: 30px; border-radius: 10px 10px 0 0; text-align: center;">
          <h1 style="color: white; margin: 0;">CRA Approuvé</h1>
        </div>
        <div style="background: #f9f9f9; padding: 30px; border-radius: 0 0 10px 10px;">
          <p>Le Compte-Rendu d'Activité suivant a été <strong style="color:#22c55e;">approuvé</strong> :</p>
          {summary}
          <p>Vous trouverez en pièce jointe le récapitulatif PDF.</p>
        </div>
      </div>
    """
    return subject, html
