"""
Application constants

Fixed copy sent to callers as event payloads. None of these are configurable
at runtime.
"""

# ============================================================================
# Caller-visible messages
# ============================================================================

REFUSAL_MESSAGE = (
    "This assistant handles questions about Jai and simple actions it's authorized "
    "to perform (share his background, propose or book time, or provide contact "
    "options). What should it help with?"
)

CALENDLY_URL = "https://calendly.com/jairathore/30min"

SCHEDULING_MESSAGE = (
    f"You can schedule a 30-minute meeting with Jai using his Calendly link: {CALENDLY_URL}\n\n"
    "This will allow you to pick a time that works for both of you. "
    "All meetings are scheduled in Pacific Time."
)

STREAM_TIMEOUT_MESSAGE = "Stream timeout"
STREAM_ERROR_MESSAGE = "Chat processing error"
STREAM_START_ERROR_MESSAGE = "Failed to start chat"


# ============================================================================
# Contact details surfaced in the system prompt
# ============================================================================

CONTACT_EMAIL = "jaiadityarathore@gmail.com"
CONTACT_LINKEDIN = "https://www.linkedin.com/in/jrathore"
CONTACT_X = "https://x.com/Jai_A_Rathore"


# ============================================================================
# Content packs
# ============================================================================

PACK_MANIFEST_FILENAME = "packs.json"
