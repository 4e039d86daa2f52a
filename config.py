# --- Configuration --------------------------------------------------------------------------------

import os
from dataclasses import dataclass
from enum import Enum


class Dimension(str, Enum):
    PRODUCT = "product"
    MARKET = "market"
    DOCUMENTATION = "documentation"
    SECURITY = "security"
    CERTIFICATIONS = "certifications"


# Display order for cards, radar axes and exports.
DIMENSIONS = (
    Dimension.PRODUCT,
    Dimension.MARKET,
    Dimension.DOCUMENTATION,
    Dimension.SECURITY,
    Dimension.CERTIFICATIONS,
)

DIMENSION_LABELS = {
    Dimension.PRODUCT: "Product",
    Dimension.MARKET: "Market",
    Dimension.DOCUMENTATION: "Documentation",
    Dimension.SECURITY: "Security",
    Dimension.CERTIFICATIONS: "Certifications",
}

SCALE_MIN = 1
SCALE_MAX = 5
DEFAULT_SCORE = 3  # neutral starting point, not an "unanswered" marker

SCALE_CAPTIONS = {
    SCALE_MIN: "1 - Very weak",
    SCALE_MAX: "5 - Very developed",
}


@dataclass(frozen=True)
class Question:
    id: str
    dimension: Dimension
    text: str


# 20 questions, 4 per dimension. Order within a dimension is the display order.
QUESTIONS = (
    # Product
    Question(
        "P1",
        Dimension.PRODUCT,
        "Does the product/service have at least one working prototype tested in a relevant "
        "environment (pilot, laboratory, users)?",
    ),
    Question(
        "P2",
        Dimension.PRODUCT,
        "Does the product clearly address needs in the defence sector (surveillance, logistics, "
        "cyber, command and control, etc.)?",
    ),
    Question(
        "P3",
        Dimension.PRODUCT,
        "Have we identified defence-specific technical requirements (norms, standards, "
        "interoperability) and started adapting the product?",
    ),
    Question(
        "P4",
        Dimension.PRODUCT,
        "Do we have production/delivery capacity (in-house or through partners) for pilots or "
        "small defence contracts?",
    ),
    # Market
    Question(
        "M1",
        Dimension.MARKET,
        "Do we know the main customers and decision makers in defence (Ministry, Armed Forces, "
        "NATO, EU, integrators)?",
    ),
    Question(
        "M2",
        Dimension.MARKET,
        "Have we had meetings or active contacts with potential customers or partners in defence?",
    ),
    Question(
        "M3",
        Dimension.MARKET,
        "Do we have strategic partnerships with companies/entities already established in the "
        "defence sector?",
    ),
    Question(
        "M4",
        Dimension.MARKET,
        "Do we have a value proposition specific to defence, distinct from our existing civilian "
        "offering?",
    ),
    # Documentation
    Question(
        "D1",
        Dimension.DOCUMENTATION,
        "Is the relevant intellectual property (patents, software, trademarks) identified and "
        "protected where needed?",
    ),
    Question(
        "D2",
        Dimension.DOCUMENTATION,
        "Is the technical documentation (architectures, specifications, manuals, data sheets) "
        "organized and up to date?",
    ),
    Question(
        "D3",
        Dimension.DOCUMENTATION,
        "Do we have NDA drafts and template contracts suitable for pilots and partnerships in a "
        "defence context?",
    ),
    Question(
        "D4",
        Dimension.DOCUMENTATION,
        "Have we identified and started the accreditation/licensing processes relevant to "
        "operating in defence?",
    ),
    # Security
    Question(
        "S1",
        Dimension.SECURITY,
        "Do we have minimum information security policies (access control, passwords, backups, "
        "device management)?",
    ),
    Question(
        "S2",
        Dimension.SECURITY,
        "Is sensitive information (code, data, critical documentation) protected (encryption, "
        "restricted access, separated environments)?",
    ),
    Question(
        "S3",
        Dimension.SECURITY,
        "Has the key team received any training/awareness in cybersecurity and information "
        "protection?",
    ),
    Question(
        "S4",
        Dimension.SECURITY,
        "Do facilities/processes have adequate physical and organizational security measures "
        "(controlled access, visitor log, restricted areas)?",
    ),
    # Certifications
    Question(
        "C1",
        Dimension.CERTIFICATIONS,
        "Do we hold relevant quality certifications (e.g. ISO 9001) or have internal processes "
        "close to that level?",
    ),
    Question(
        "C2",
        Dimension.CERTIFICATIONS,
        "Do we hold or are we implementing information security practices/certifications "
        "(e.g. ISO 27001)?",
    ),
    Question(
        "C3",
        Dimension.CERTIFICATIONS,
        "Have we identified defence-specific standards/certifications, or those of related "
        "sectors (aeronautics, space, cyber), that may be required?",
    ),
    Question(
        "C4",
        Dimension.CERTIFICATIONS,
        "Is there a certification roadmap with priorities, deadlines and estimated resources?",
    ),
)

NOT_ASSESSED = "Not yet assessed"

# (upper bound inclusive, label, interpretation). A score of exactly 0 is NOT_ASSESSED.
LEVEL_BANDS = (
    (1.5, "Critical", "Serious barriers to entering the defence market."),
    (2.5, "Weak", "Needs urgent reinforcement."),
    (3.5, "Moderate", "A base exists, but it is fragile."),
    (4.5, "Good", "Conditions in place for pilots and first contracts."),
    (5.0, "Very good", "Ready for more demanding opportunities."),
)


# --- Runtime settings -----------------------------------------------------------------------------


def _env_flag(name, default=False):
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


HOST = os.environ.get("READINESS_HOST", "127.0.0.1")
PORT = int(os.environ.get("READINESS_PORT", "8050"))
DEBUG = _env_flag("READINESS_DEBUG")
LOG_LEVEL = os.environ.get("READINESS_LOG_LEVEL", "INFO").upper()
