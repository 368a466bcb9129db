"""
Keyword and pattern rules for routing citizen utterances.

Rules cover English, Hindi (Devanagari) and romanized Hindi. They are the
first, deterministic stage of topic classification; the generative
classifier only sees utterances no rule recognises.
"""

import re
from typing import Optional

from ..models import IssueType, Topic

# =============================================================================
# TRACKING IDS
# =============================================================================

TRACKING_ID_PATTERN = re.compile(r"\bJS-\d{8}-\d{5}\b", re.IGNORECASE)

TRACKING_KEYWORDS = [
    "status of my complaint", "complaint status", "track my complaint", "track complaint",
    "tracking number", "tracking id", "status of complaint", "what happened to my complaint",
    "शिकायत की स्थिति", "ट्रैकिंग नंबर", "मेरी शिकायत का क्या", "shikayat ki sthiti",
    "complaint ka status",
]

FOLLOW_UP_KEYWORDS = [
    "add a note", "add note", "add a comment", "add comment", "follow up", "follow-up",
    "still not fixed", "still not resolved", "अभी तक ठीक नहीं", "abhi tak theek nahi",
]

# =============================================================================
# ISSUE REPORTING
# =============================================================================

ISSUE_TYPE_KEYWORDS: dict[IssueType, list[str]] = {
    IssueType.POTHOLE: ["pothole", "pot hole", "गड्ढा", "गड्ढे", "gaddha", "gadda"],
    IssueType.ROAD_DAMAGE: ["broken road", "road damage", "damaged road", "road is broken", "टूटी सड़क", "सड़क टूटी", "sadak tooti"],
    IssueType.STREETLIGHT: ["streetlight", "street light", "street lamp", "स्ट्रीटलाइट", "स्ट्रीट लाइट", "बत्ती"],
    IssueType.GARBAGE: ["garbage", "trash", "waste", "rubbish", "dump", "कचरा", "कूड़ा", "kachra", "kuda"],
    IssueType.WATER_SUPPLY: ["no water", "water supply", "water leak", "pipeline", "tap water", "पानी नहीं", "पानी की आपूर्ति", "pani nahi"],
    IssueType.SEWAGE_DRAINAGE: ["sewage", "sewer", "drain", "drainage", "overflow", "manhole", "नाली", "सीवर", "naali", "nali"],
    IssueType.ELECTRICITY: ["power cut", "no electricity", "electricity", "transformer", "बिजली", "bijli"],
    IssueType.ENCROACHMENT: ["encroachment", "illegal construction", "अतिक्रमण", "अवैध निर्माण"],
    IssueType.NOISE: ["noise", "loudspeaker", "शोर", "shor"],
}

ISSUE_REPORT_KEYWORDS = [
    "report a problem", "report an issue", "i want to report", "i want to complain",
    "register a complaint", "file a complaint", "lodge a complaint", "complaint about",
    "not working", "broken", "शिकायत दर्ज", "शिकायत करनी", "शिकायत करना", "shikayat",
]

# =============================================================================
# SCHEME DISCOVERY
# =============================================================================

SCHEME_KEYWORDS = [
    "scheme", "yojana", "subsidy", "pension", "scholarship", "benefit", "welfare",
    "government help", "financial help", "financial assistance", "loan", "insurance",
    "programme", "program", "apply for", "eligible", "eligibility",
    "योजना", "योजनाएं", "सब्सिडी", "पेंशन", "छात्रवृत्ति", "सरकारी मदद", "लाभ", "पात्र", "sarkari madad",
]

SCHEME_QUESTION_PATTERNS = [
    r"what (?:schemes?|programs?|programmes?|benefits?) (?:are|is|can|do)",
    r"(?:which|any) (?:schemes?|programs?|programmes?)",
    r"schemes? (?:for|that)",
    r"how (?:can|do) i (?:get|apply)",
    r"help me with",
    r"(?:can|could) (?:the )?government help",
]

SCHEME_CATEGORY_KEYWORDS: dict[str, list[str]] = {
    "agriculture": ["farmer", "farming", "kisan", "crop", "irrigation", "agriculture", "tractor", "seed", "fertilizer",
                    "किसान", "खेती", "फसल", "सिंचाई", "कृषि"],
    "health": ["health", "hospital", "treatment", "medical", "insurance", "illness", "surgery",
               "स्वास्थ्य", "अस्पताल", "इलाज", "बीमारी"],
    "education": ["education", "school", "college", "student", "scholarship", "study",
                  "शिक्षा", "स्कूल", "कॉलेज", "छात्र", "छात्रवृत्ति", "पढ़ाई"],
    "housing": ["house", "housing", "home", "shelter", "awas", "आवास", "घर", "मकान"],
    "employment": ["job", "employment", "unemployed", "skill", "training", "rozgar", "work",
                   "रोज़गार", "रोजगार", "नौकरी", "कौशल"],
    "social_security": ["pension", "old age", "widow", "senior citizen", "disability",
                        "पेंशन", "बुज़ुर्ग", "विधवा", "दिव्यांग"],
    "women_child": ["pregnant", "girl child", "daughter", "maternity", "women", "mother",
                    "गर्भवती", "बेटी", "महिला", "मातृत्व"],
    "financial_inclusion": ["bank account", "loan", "credit", "mudra", "business", "entrepreneur",
                            "बैंक खाता", "ऋण", "कर्ज", "व्यवसाय"],
}

ELIGIBILITY_KEYWORDS = [
    "am i eligible", "eligible", "eligibility", "can i apply", "do i qualify", "qualify",
    "क्या मैं पात्र", "पात्रता", "पात्र हूँ", "क्या मुझे मिल सकता", "kya main patra", "mil sakta",
]

# =============================================================================
# CONVERSATION CONTROL
# =============================================================================

NEW_TOPIC_KEYWORDS = [
    "new topic", "start over", "start again", "different question", "another question",
    "change topic", "change the topic", "change the subject", "talk about something else",
    "नया सवाल", "दूसरी बात", "नई बात", "कुछ और पूछना", "naya sawal", "kuch aur poochna",
]

# Only a topic switch when they are the whole utterance; "कुछ और बताइए" asks for more
STANDALONE_NEW_TOPIC = {"something else", "कुछ और", "kuch aur"}

ENGLISH_ORDINALS: dict[str, int] = {
    "first": 0, "1st": 0, "second": 1, "2nd": 1, "third": 2, "3rd": 2,
    "fourth": 3, "4th": 3, "fifth": 4, "5th": 4,
}

# Devanagari and romanized Hindi ordinals
HINDI_ORDINALS: dict[str, int] = {
    "पहली": 0, "पहला": 0, "दूसरी": 1, "दूसरा": 1, "दूसरे": 1,
    "तीसरी": 2, "तीसरा": 2, "तीसरे": 2, "चौथी": 3, "चौथा": 3, "चौथे": 3,
    "पाँचवीं": 4, "पांचवीं": 4, "पाँचवा": 4, "पांचवा": 4,
    "pehla": 0, "pehli": 0, "doosra": 1, "doosri": 1, "dusra": 1, "dusri": 1,
    "teesra": 2, "teesri": 2, "tisra": 2, "tisri": 2, "chautha": 3, "chauthi": 3,
}

_ENGLISH_ORDINAL = re.compile(
    r"\b(?:the\s+)?(first|second|third|fourth|fifth|1st|2nd|3rd|4th|5th)\s+(?:one|scheme|option|yojana)\b"
    # a bare "the second" only when it ends the utterance, so "the first step" is not a reference
    r"|\bthe\s+(first|second|third|fourth|fifth|1st|2nd|3rd|4th|5th)\s*[.!?]*\s*$",
    re.IGNORECASE,
)

_NUMBER_REFERENCE = re.compile(r"\b(?:number|no\.?|option)\s*([1-5])\b", re.IGNORECASE)


# =============================================================================
# DETECTION FUNCTIONS
# =============================================================================


def _normalize(text: str) -> str:
    return " ".join(text.lower().split())


def _contains_any(text: str, keywords: list[str]) -> bool:
    """Keyword match; ASCII keywords must start at a word boundary."""
    for keyword in keywords:
        if keyword.isascii():
            if re.search(rf"\b{re.escape(keyword)}", text):
                return True
        elif keyword in text:
            return True
    return False


def find_tracking_id(text: str) -> Optional[str]:
    match = TRACKING_ID_PATTERN.search(text)
    return match.group(0).upper() if match else None


def detect_issue_type(text: str) -> Optional[IssueType]:
    """Return the first issue type whose keywords occur in `text`."""
    normalized = _normalize(text)
    for issue_type, keywords in ISSUE_TYPE_KEYWORDS.items():
        if _contains_any(normalized, keywords):
            return issue_type
    return None


def detect_issue_intent(text: str) -> bool:
    normalized = _normalize(text)
    return detect_issue_type(normalized) is not None or _contains_any(normalized, ISSUE_REPORT_KEYWORDS)


def detect_tracking_intent(text: str) -> bool:
    return find_tracking_id(text) is not None or _contains_any(_normalize(text), TRACKING_KEYWORDS)


def detect_scheme_intent(text: str) -> bool:
    normalized = _normalize(text)
    if _contains_any(normalized, SCHEME_KEYWORDS):
        return True
    return any(re.search(p, normalized) for p in SCHEME_QUESTION_PATTERNS)


def detect_scheme_category(text: str) -> Optional[str]:
    """Best matching scheme category, by number of keyword hits."""
    normalized = _normalize(text)
    best, best_hits = None, 0
    for category, keywords in SCHEME_CATEGORY_KEYWORDS.items():
        hits = sum(1 for k in keywords if _contains_any(normalized, [k]))
        if hits > best_hits:
            best, best_hits = category, hits
    return best


def detect_eligibility_question(text: str) -> bool:
    return _contains_any(_normalize(text), ELIGIBILITY_KEYWORDS)


def detect_new_topic(text: str) -> bool:
    normalized = _normalize(text)
    if normalized.strip(" .,!?।") in STANDALONE_NEW_TOPIC:
        return True
    return _contains_any(normalized, NEW_TOPIC_KEYWORDS)


def detect_follow_up(text: str) -> bool:
    return _contains_any(_normalize(text), FOLLOW_UP_KEYWORDS)


def resolve_ordinal(text: str) -> Optional[int]:
    """Zero-based position referred to by phrases like "the second one"."""
    match = _ENGLISH_ORDINAL.search(text)
    if match:
        word = (match.group(1) or match.group(2)).lower()
        return ENGLISH_ORDINALS[word]

    match = _NUMBER_REFERENCE.search(text)
    if match:
        return int(match.group(1)) - 1

    for token in _normalize(text).split():
        token = token.strip(".,!?।")
        if token in HINDI_ORDINALS:
            return HINDI_ORDINALS[token]
    return None


def detect_rule_topic(text: str) -> Optional[Topic]:
    """Deterministic topic routing.

    Priority: tracking id or tracking phrasing > explicit issue keywords >
    scheme / programme phrasing. Returns None when no rule fires.
    """
    if detect_tracking_intent(text):
        return Topic.ISSUE_TRACKING

    is_issue = detect_issue_intent(text)
    is_scheme = detect_scheme_intent(text)
    # "electricity subsidy scheme" is a scheme question, not a complaint
    explicit_report = _contains_any(_normalize(text), ISSUE_REPORT_KEYWORDS)
    if is_issue and (explicit_report or not is_scheme):
        return Topic.ISSUE_REPORTING
    if is_scheme:
        return Topic.SCHEME_DISCOVERY
    return None
