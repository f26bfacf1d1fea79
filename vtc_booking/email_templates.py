"""
MJML Email Templates
Booking confirmation (customer) and new booking alert (operator)
"""

import html
from datetime import date
from typing import Optional

from .config import BRAND_NAME, FRONTEND_URL

# Brand theme colors - Indigo/Violet color scheme
THEME = {
    "primary": "#667eea",
    "primary_dark": "#764ba2",
    "background": "#f9f9f9",
    "card_bg": "#ffffff",
    "text_primary": "#333333",
    "text_secondary": "#555555",
    "text_muted": "#777777",
    "border": "#e2e8f0",
    "success": "#28a745",
    "header_dark": "#333333",
}

SERVICE_LABELS = {
    "standard": "Standard",
    "premium": "Premium",
    "business": "Business",
}


def _e(value) -> str:
    """Escape customer-supplied text before it lands in the markup"""
    return html.escape(str(value)) if value is not None else ""


def format_date_fr(iso_date: str) -> str:
    """2026-10-20 -> 20/10/2026"""
    try:
        return date.fromisoformat(iso_date).strftime("%d/%m/%Y")
    except ValueError:
        return iso_date


def _detail_rows(rows: list[tuple[str, str]]) -> str:
    return "\n".join(
        f"""
        <tr>
          <td style="padding: 8px 0; font-weight: bold; color: {THEME['text_secondary']};">{label} :</td>
          <td style="padding: 8px 0;">{value}</td>
        </tr>"""
        for label, value in rows
    )


def get_base_template(
    title: str,
    preview_text: str,
    content_sections: str,
    header_color: Optional[str] = None,
    cta_url: Optional[str] = None,
    cta_label: Optional[str] = None,
) -> str:
    """Base MJML template wrapper for all emails"""

    cta_section = ""
    if cta_url and cta_label:
        cta_section = f"""
        <mj-section padding="20px 0">
          <mj-column>
            <mj-button
              href="{cta_url}"
              background-color="{THEME['primary']}"
              color="#ffffff"
              font-weight="600"
              border-radius="8px"
              padding="18px 40px"
              font-size="16px">
              {cta_label}
            </mj-button>
          </mj-column>
        </mj-section>
        """

    return f"""
    <mjml>
      <mj-head>
        <mj-title>{title}</mj-title>
        <mj-preview>{preview_text}</mj-preview>
        <mj-attributes>
          <mj-all font-family="Arial, sans-serif" />
          <mj-text font-size="16px" line-height="1.6" color="{THEME['text_secondary']}" />
        </mj-attributes>
      </mj-head>
      <mj-body background-color="{THEME['background']}" width="600px">
        <!-- Header -->
        <mj-section background-color="{header_color or THEME['primary']}" padding="30px 20px">
          <mj-column>
            <mj-text align="center" color="#ffffff" font-size="28px" font-weight="bold" padding="0">
              🚗 {_e(BRAND_NAME)}
            </mj-text>
            <mj-text align="center" color="#ffffff" font-size="20px" padding="10px 0 0 0">
              {title}
            </mj-text>
          </mj-column>
        </mj-section>

        <!-- Main Content -->
        <mj-section background-color="{THEME['background']}" padding="30px 20px">
          <mj-column>
            {content_sections}
          </mj-column>
        </mj-section>

        {cta_section}

        <!-- Footer -->
        <mj-section padding="20px">
          <mj-column>
            <mj-text align="center" font-size="13px" color="#94a3b8" padding="0">
              © {date.today().year} {_e(BRAND_NAME)}
            </mj-text>
          </mj-column>
        </mj-section>
      </mj-body>
    </mjml>
    """


def booking_confirmation_template(booking: dict) -> str:
    """Customer confirmation MJML template"""
    rows = _detail_rows(
        [
            ("N° de réservation", f"#{_e(booking['id'])}"),
            ("Départ", _e(booking["pickup"])),
            ("Destination", _e(booking["destination"])),
            ("Date", _e(format_date_fr(booking["date"]))),
            ("Heure", _e(booking["time"])),
            ("Passagers", _e(booking["passengers"])),
            ("Service", _e(SERVICE_LABELS.get(booking["serviceType"], booking["serviceType"]))),
        ]
    )

    content = f"""
    <mj-text font-size="18px" color="{THEME['success']}" font-weight="bold" padding="0 0 20px 0">
      ✅ Votre réservation a été enregistrée avec succès !
    </mj-text>

    <mj-text font-size="18px" font-weight="bold" color="{THEME['text_primary']}" container-background-color="{THEME['card_bg']}" padding="25px 25px 0 25px">
      Détails de votre course
    </mj-text>

    <mj-table container-background-color="{THEME['card_bg']}" padding="10px 25px 25px 25px">
      {rows}
    </mj-table>

    <mj-text padding="20px 0 0 0">
      Merci d'avoir choisi {_e(BRAND_NAME)}. Nous vous souhaitons une excellente course !
    </mj-text>
    """

    return get_base_template(
        title="Confirmation de réservation",
        preview_text=f"Réservation #{_e(booking['id'])} du {_e(format_date_fr(booking['date']))} à {_e(booking['time'])}",
        content_sections=content,
        cta_url=f"{FRONTEND_URL}/confirmation.html?id={_e(booking['id'])}",
        cta_label="Voir ma réservation",
    )


def booking_notification_template(booking: dict) -> str:
    """Operator alert MJML template - includes the customer's contact details"""
    rows = _detail_rows(
        [
            ("N°", f"#{_e(booking['id'])}"),
            ("Nom", _e(booking["name"])),
            ("Téléphone", _e(booking["phone"])),
            ("Email", _e(booking.get("email")) or "Non fourni"),
            ("Départ", _e(booking["pickup"])),
            ("Destination", _e(booking["destination"])),
            ("Date", _e(format_date_fr(booking["date"]))),
            ("Heure", _e(booking["time"])),
            ("Passagers", _e(booking["passengers"])),
            ("Service", _e(SERVICE_LABELS.get(booking["serviceType"], booking["serviceType"]))),
            ("Notes", _e(booking.get("notes")) or "Aucune"),
        ]
    )

    content = f"""
    <mj-text padding="0 0 20px 0">
      Une nouvelle réservation a été faite sur le site :
    </mj-text>

    <mj-table container-background-color="{THEME['card_bg']}" padding="15px">
      {rows}
    </mj-table>
    """

    return get_base_template(
        title="🚨 Nouvelle réservation reçue",
        preview_text=f"Réservation #{_e(booking['id'])} de {_e(booking['name'])}",
        content_sections=content,
        header_color=THEME["header_dark"],
    )
