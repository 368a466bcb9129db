"""
Bilingual citizen-facing message catalogue.

Every canned or templated sentence the engine speaks lives here, keyed by
message id and language.
"""

from .models import Language

MESSAGES: dict[str, dict[Language, str]] = {
    # Degraded / error paths
    "fallback": {
        Language.EN: "Sorry, I am having trouble answering right now. Please try again in a little while.",
        Language.HI: "क्षमा करें, अभी उत्तर देने में दिक्कत हो रही है। कृपया थोड़ी देर बाद फिर से प्रयास करें।",
    },
    "retry_later": {
        Language.EN: "Our service is busy at the moment. Please try again in a few minutes.",
        Language.HI: "इस समय सेवा व्यस्त है। कृपया कुछ मिनट बाद फिर से प्रयास करें।",
    },
    "repeat_please": {
        Language.EN: "Sorry, I could not hear that clearly. Could you please say it again?",
        Language.HI: "क्षमा करें, मैं ठीक से सुन नहीं पाया। क्या आप फिर से बोल सकते हैं?",
    },
    "not_found_scheme": {
        Language.EN: "I could not find a scheme with that name in our records.",
        Language.HI: "हमारे रिकॉर्ड में इस नाम की कोई योजना नहीं मिली।",
    },
    "not_found_issue": {
        Language.EN: "No record found for tracking number {tracking_id}. Please check the number and try again.",
        Language.HI: "ट्रैकिंग नंबर {tracking_id} का कोई रिकॉर्ड नहीं मिला। कृपया नंबर जाँच कर फिर से बताएं।",
    },
    # General conversation
    "welcome": {
        Language.EN: "Hello! I can help you find government schemes, report a civic problem, or check the status of a complaint. What would you like to do?",
        Language.HI: "नमस्ते! मैं सरकारी योजनाएं खोजने, नागरिक समस्या दर्ज करने, या शिकायत की स्थिति जानने में आपकी मदद कर सकता हूँ। आप क्या करना चाहेंगे?",
    },
    "new_topic": {
        Language.EN: "Sure, let's start afresh. What would you like help with?",
        Language.HI: "ठीक है, नए सिरे से शुरू करते हैं। आपको किस बारे में मदद चाहिए?",
    },
    # Scheme discovery
    "schemes_found": {
        Language.EN: "Here are schemes that may help you: {names}.",
        Language.HI: "ये योजनाएं आपकी मदद कर सकती हैं: {names}।",
    },
    "scheme_detail": {
        Language.EN: "{name}: {description} Benefits: {benefits} How to apply: {process}",
        Language.HI: "{name}: {description} लाभ: {benefits} आवेदन कैसे करें: {process}",
    },
    "schemes_clarify": {
        Language.EN: "I could not find a matching scheme yet. Could you tell me a little more, such as your occupation or what kind of help you need?",
        Language.HI: "अभी कोई मिलती-जुलती योजना नहीं मिली। क्या आप थोड़ा और बता सकते हैं, जैसे आपका काम या आपको किस तरह की मदद चाहिए?",
    },
    "schemes_none": {
        Language.EN: "I am sorry, I could not find a scheme for that. You can also call the citizen helpline 1800-11-0031 for guidance.",
        Language.HI: "क्षमा करें, इसके लिए कोई योजना नहीं मिली। मार्गदर्शन के लिए आप नागरिक हेल्पलाइन 1800-11-0031 पर भी कॉल कर सकते हैं।",
    },
    "schemes_cross_language": {
        Language.EN: "(This information is available only in Hindi.)",
        Language.HI: "(यह जानकारी केवल अंग्रेज़ी में उपलब्ध है।)",
    },
    "which_scheme": {
        Language.EN: "Which scheme would you like me to check? Please tell me its name.",
        Language.HI: "आप किस योजना के लिए जाँच करवाना चाहते हैं? कृपया उसका नाम बताएं।",
    },
    # Eligibility
    "eligible": {
        Language.EN: "Based on what you told me, you appear to be eligible for {name}.",
        Language.HI: "आपकी दी गई जानकारी के अनुसार, आप {name} के लिए पात्र लगते हैं।",
    },
    "not_eligible": {
        Language.EN: "You may not be eligible for {name}. These conditions are not met: {criteria}.",
        Language.HI: "आप शायद {name} के लिए पात्र नहीं हैं। ये शर्तें पूरी नहीं होतीं: {criteria}।",
    },
    "eligibility_needs_info": {
        Language.EN: "To confirm your eligibility for {name}, please tell me: {fields}.",
        Language.HI: "{name} के लिए आपकी पात्रता पक्की करने के लिए कृपया बताएं: {fields}।",
    },
    # Issue reporting
    "ask_issue_type": {
        Language.EN: "What kind of problem is it? For example a pothole, garbage, a broken streetlight or water supply.",
        Language.HI: "यह किस तरह की समस्या है? जैसे गड्ढा, कचरा, खराब स्ट्रीटलाइट या पानी की आपूर्ति।",
    },
    "ask_description": {
        Language.EN: "Please describe the problem in a few words.",
        Language.HI: "कृपया समस्या को कुछ शब्दों में बताएं।",
    },
    "ask_city": {
        Language.EN: "Which city or area is this problem in?",
        Language.HI: "यह समस्या किस शहर या इलाके में है?",
    },
    "ask_state": {
        Language.EN: "And which state is that in?",
        Language.HI: "यह किस राज्य में है?",
    },
    "issue_filed": {
        Language.EN: "Your complaint about {issue} in {city} has been registered. Your tracking number is {tracking_id}.",
        Language.HI: "{city} में {issue} से जुड़ी आपकी शिकायत दर्ज हो गई है। आपका ट्रैकिंग नंबर {tracking_id} है।",
    },
    "issue_filed_partial": {
        Language.EN: "Some details were missing, so we recorded what you told us.",
        Language.HI: "कुछ जानकारी अधूरी थी, इसलिए आपने जो बताया वही दर्ज किया गया है।",
    },
    # Issue tracking
    "ask_tracking_id": {
        Language.EN: "Please tell me your complaint tracking number. It looks like JS-20250101-00042.",
        Language.HI: "कृपया अपनी शिकायत का ट्रैकिंग नंबर बताएं। यह JS-20250101-00042 जैसा दिखता है।",
    },
    "issue_status": {
        Language.EN: "Complaint {tracking_id} ({issue}) is currently: {status}.",
        Language.HI: "शिकायत {tracking_id} ({issue}) की वर्तमान स्थिति: {status}।",
    },
    "follow_up_added": {
        Language.EN: "I have added your note to complaint {tracking_id}. Its status is still {status}.",
        Language.HI: "आपकी बात शिकायत {tracking_id} में जोड़ दी गई है। इसकी स्थिति अभी भी {status} है।",
    },
    # Suggested next utterances
    "suggest_details": {
        Language.EN: "Tell me about the first one",
        Language.HI: "पहली योजना के बारे में बताइए",
    },
    "suggest_eligibility": {
        Language.EN: "Am I eligible?",
        Language.HI: "क्या मैं पात्र हूँ?",
    },
    "suggest_track": {
        Language.EN: "What is the status of my complaint?",
        Language.HI: "मेरी शिकायत की स्थिति क्या है?",
    },
}

STATUS_LABELS: dict[str, dict[Language, str]] = {
    "submitted": {Language.EN: "submitted", Language.HI: "दर्ज"},
    "under_review": {Language.EN: "under review", Language.HI: "समीक्षा में"},
    "in_progress": {Language.EN: "work in progress", Language.HI: "काम जारी"},
    "resolved": {Language.EN: "resolved", Language.HI: "हल हो गई"},
    "rejected": {Language.EN: "rejected", Language.HI: "अस्वीकृत"},
    "closed": {Language.EN: "closed", Language.HI: "बंद"},
}

ISSUE_LABELS: dict[str, dict[Language, str]] = {
    "pothole": {Language.EN: "a pothole", Language.HI: "गड्ढे"},
    "road_damage": {Language.EN: "road damage", Language.HI: "टूटी सड़क"},
    "streetlight": {Language.EN: "a streetlight", Language.HI: "स्ट्रीटलाइट"},
    "garbage": {Language.EN: "garbage", Language.HI: "कचरे"},
    "water_supply": {Language.EN: "water supply", Language.HI: "पानी की आपूर्ति"},
    "sewage_drainage": {Language.EN: "sewage or drainage", Language.HI: "सीवर या नाली"},
    "electricity": {Language.EN: "electricity", Language.HI: "बिजली"},
    "encroachment": {Language.EN: "encroachment", Language.HI: "अतिक्रमण"},
    "noise": {Language.EN: "noise", Language.HI: "शोर"},
    "other": {Language.EN: "a civic problem", Language.HI: "नागरिक समस्या"},
}

PROFILE_FIELD_LABELS: dict[str, dict[Language, str]] = {
    "age": {Language.EN: "your age", Language.HI: "आपकी उम्र"},
    "gender": {Language.EN: "your gender", Language.HI: "आपका लिंग"},
    "annual_income": {Language.EN: "your annual family income", Language.HI: "आपकी सालाना पारिवारिक आय"},
    "occupation": {Language.EN: "your occupation", Language.HI: "आपका काम"},
    "state": {Language.EN: "your state", Language.HI: "आपका राज्य"},
    "social_category": {Language.EN: "your social category", Language.HI: "आपकी सामाजिक श्रेणी"},
    "is_bpl": {Language.EN: "whether you have a BPL card", Language.HI: "क्या आपके पास बीपीएल कार्ड है"},
    "land_holding_acres": {Language.EN: "how much land you own", Language.HI: "आपके पास कितनी ज़मीन है"},
    "has_disability": {Language.EN: "whether you have a disability", Language.HI: "क्या आप दिव्यांग हैं"},
}


def message(key: str, language: Language, **kwargs) -> str:
    """Render a catalogue message in `language`."""
    template = MESSAGES[key][language]
    return template.format(**kwargs) if kwargs else template


def label(table: dict[str, dict[Language, str]], key: str, language: Language) -> str:
    entry = table.get(key)
    if entry is None:
        return key.replace("_", " ")
    return entry[language]
