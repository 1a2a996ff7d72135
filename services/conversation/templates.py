"""Bilingual text tables for the municipal assistant.

Each supported language has one LanguagePack. Packs are validated when this
module is imported, so a missing reply for any table intent fails fast.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Mapping

from models.session_models import Language, Notification
from models.waste_models import BinType, WasteType
from services.conversation.intents import COMPLAINT_INTENTS, Intent, KEYWORD_TABLE

# Intents answered straight from a reply template.
TEMPLATE_INTENTS = frozenset(
	{
		Intent.HAZARDOUS_WASTE,
		Intent.ORGANIC_WASTE,
		Intent.RECYCLABLE_WASTE,
		Intent.UNKNOWN,
	}
	| {intent for _, intent in KEYWORD_TABLE[Language.ENGLISH]}
)


@dataclass(frozen=True)
class LanguagePack:
	"""All user-facing strings for one language."""

	greeting: str
	welcome: str
	switched: str
	replies: Mapping[Intent, str]
	complaint_labels: Mapping[Intent, str]
	status_update: str
	photo_ack: str
	letter_intro: str
	complaint_letter: str
	complaint_summary: str
	complaint_sentence: str
	default_location: str
	analyzing: str
	analysis_result: str
	analysis_unknown: str
	analysis_failed: str
	analysis_superseded: str
	bin_labels: Mapping[BinType, str]
	waste_labels: Mapping[WasteType, str]
	reward: str
	attach_prompt: str
	notifications: Mapping[str, Notification] = field(default_factory=dict)

	def __post_init__(self) -> None:
		missing = TEMPLATE_INTENTS - set(self.replies)
		if missing:
			raise ValueError(f"Missing replies for intents: {sorted(i.value for i in missing)}")
		if set(self.complaint_labels) != set(COMPLAINT_INTENTS):
			raise ValueError("Complaint labels must cover exactly the complaint intents.")
		missing_notes = set(NOTIFICATION_KEYS) - set(self.notifications)
		if missing_notes:
			raise ValueError(f"Missing notifications: {sorted(missing_notes)}")


NOTIFICATION_KEYS = (
	"language_changed",
	"image_attached",
	"image_analysis_complete",
	"waste_analysis_complete",
	"waste_analysis_failed",
	"eco_points",
	"unsupported_type",
	"too_large",
	"empty",
	"already_attached",
)

ECO_POINTS_PER_ANALYSIS = 10

_COMPLAINT_LETTER_EN = """To
The Municipal Commissioner,
[Name of Municipal Corporation]
[City Name]

Subject: Complaint regarding {issue} at {location}

Respected Sir/Madam,

I, ______________________________________ (Name),
residing at ______________________________________ (Full Address),
Mobile No.: ______________________,
Email: __________________________,

wish to bring to your kind notice the problem of {issue} at the above-mentioned location.
This poses a serious health and environmental hazard to local residents.

Kindly take immediate action to resolve this issue.

Thank you for your prompt attention.

Date: ________________            Signature: ________________"""

_COMPLAINT_LETTER_HI = """सेवा में,
नगर आयुक्त महोदय,
[नगर निगम का नाम]
[शहर का नाम]

विषय: {location} पर {issue} के संबंध में शिकायत

आदरणीय महोदय/महोदया,

मैं, ______________________________________ (नाम),
निवासी ______________________________________ (पूरा पता),
मोबाइल नंबर: ______________________,
ईमेल: __________________________,

आपका ध्यान उपर्युक्त स्थान पर {issue} की समस्या की ओर आकर्षित करना चाहता/चाहती हूँ।
इससे स्थानीय निवासियों के स्वास्थ्य और पर्यावरण को गंभीर खतरा है।

कृपया इस समस्या के समाधान हेतु तत्काल कार्रवाई करें।

आपके शीघ्र ध्यान के लिए धन्यवाद।

दिनांक: ________________            हस्ताक्षर: ________________"""


ENGLISH = LanguagePack(
	greeting="Hello! I'm Nagarsathi, your municipal assistant. How can I help you today?",
	welcome="I've switched to English. How can I help you today?",
	switched="I've switched to English. How can I help you today?",
	replies={
		Intent.GARBAGE: "I've logged your garbage collection complaint. Expect resolution within 24 hours. Your tracking ID is #GC-2023-",
		Intent.WATER: "Your water supply issue has been registered. A team will investigate within 48 hours. Tracking ID: #WS-2023-",
		Intent.ROAD: "Road maintenance request logged. Our team will assess the condition within 3-5 days. Tracking ID: #RM-2023-",
		Intent.CERTIFICATE: "For birth/death certificates, please visit our services page or visit the municipal office with required documents.",
		Intent.BILL: "You can pay your municipal bills online through our services page or at any authorized collection center.",
		Intent.WASTE_INFO: "For proper food waste disposal, we recommend composting it. The corporation provides subsidized composting bins.",
		Intent.RECYCLE_INFO: "Please segregate recyclable waste (plastic, paper, glass) from general waste. Collection happens every Tuesday and Friday.",
		Intent.TAX: "Property tax payments can be made online or at designated collection centers. The next due date is 30th June. Late payments incur a 2% monthly penalty.",
		Intent.PERMIT: "Building permits can be applied for online through our municipal portal. Processing typically takes 15-20 working days.",
		Intent.ORGANIC_WASTE: "This sounds like organic waste. Food scraps, peels and garden leaves are decomposable and go in the GREEN bin. You can also compost them at home; the corporation provides subsidized composting bins.",
		Intent.RECYCLABLE_WASTE: "This sounds like recyclable waste. Clean plastic, paper, glass and metal are non-decomposable and go in the BLUE bin. Collection happens every Tuesday and Friday.",
		Intent.HAZARDOUS_WASTE: "This sounds like hazardous waste. Batteries, chemicals, paint, medicines and e-waste must not go in regular bins. Please hand them over at the nearest hazardous waste collection center or request a special pickup.",
		Intent.UNKNOWN: "I'm sorry, I don't have information about that. Please contact our helpdesk for assistance.",
	},
	complaint_labels={Intent.GARBAGE: "garbage", Intent.WATER: "water", Intent.ROAD: "road"},
	status_update="UPDATE: Your {category} complaint has been assigned to our field team. They will reach the location soon.",
	photo_ack="Thank you for the image. I can see this is an issue that needs attention. I've logged this complaint with high priority. Expect resolution within 24 hours. Your tracking ID is #MC-2023-",
	letter_intro="Here is a complaint letter you can fill in and submit to the municipal office:",
	complaint_letter=_COMPLAINT_LETTER_EN,
	complaint_summary="Complaint: {issue}, Location: {loc}",
	complaint_sentence="I want to report a {type} issue at {location}. {description}",
	default_location="the location shown in the photo",
	analyzing="🔍 Analyzing your image to identify the type of waste...",
	analysis_result="Waste analysis complete! Detected: {detected}. This is {waste_type} waste, so please put it in the {bin} bin. Confidence: {confidence}%.",
	analysis_unknown="I couldn't confidently identify this waste (confidence: {confidence}%). Please keep it aside for the collection team or describe it in text.",
	analysis_failed="Sorry, I could not analyze this image. Please try again or describe the issue in text.",
	analysis_superseded="This analysis was replaced by your newer photo.",
	bin_labels={BinType.GREEN: "GREEN", BinType.BLUE: "BLUE", BinType.UNKNOWN: "UNKNOWN"},
	waste_labels={
		WasteType.DECOMPOSABLE: "decomposable",
		WasteType.NON_DECOMPOSABLE: "non-decomposable",
		WasteType.UNKNOWN: "unknown",
	},
	reward="🎉 You earned {points} eco-points for segregating your waste correctly! Keep it up.",
	attach_prompt="Please identify this waste and tell me how to dispose of it.",
	notifications={
		"language_changed": Notification("Language Changed", "Now chatting in English"),
		"image_attached": Notification("Image Attached", "Your image has been attached to the chat."),
		"image_analysis_complete": Notification("Image Analysis Complete", "Issue identified and logged"),
		"waste_analysis_complete": Notification("Waste Analysis Complete", "Your waste has been classified"),
		"waste_analysis_failed": Notification("Analysis Failed", "We could not analyze your image", "warning"),
		"eco_points": Notification("Eco-points Earned", "+{points} eco-points added to your account"),
		"unsupported_type": Notification("Invalid File", "Please attach an image file.", "warning"),
		"too_large": Notification("File Too Large", "Please attach an image smaller than 5 MB.", "warning"),
		"empty": Notification("Invalid File", "The selected image is empty.", "warning"),
		"already_attached": Notification("Attachment Pending", "Remove the current image before attaching another.", "warning"),
	},
)

HINDI = LanguagePack(
	greeting="नमस्ते! मैं नगरसाथी हूँ, आपका नगरपालिका सहायक। आज मैं आपकी किस प्रकार सहायता कर सकता हूँ?",
	welcome="नमस्ते! मैं नगरसाथी हूँ, आपका नगरपालिका सहायक। आज मैं आपकी किस प्रकार सहायता कर सकता हूँ?",
	switched="मैंने हिंदी में स्विच कर लिया है। मैं आपकी कैसे सहायता कर सकता हूँ?",
	replies={
		Intent.GARBAGE: "मैंने आपकी कचरा संग्रह शिकायत दर्ज कर ली है। 24 घंटे के भीतर समाधान की उम्मीद करें। आपका ट्रैकिंग आईडी है #GC-2023-",
		Intent.WATER: "आपकी पानी की आपूर्ति की समस्या दर्ज कर ली गई है। एक टीम 48 घंटों के भीतर जांच करेगी। ट्रैकिंग आईडी: #WS-2023-",
		Intent.ROAD: "सड़क रखरखाव अनुरोध दर्ज किया गया। हमारी टीम 3-5 दिनों के भीतर स्थिति का आकलन करेगी। ट्रैकिंग आईडी: #RM-2023-",
		Intent.CERTIFICATE: "जन्म/मृत्यु प्रमाणपत्र के लिए, कृपया हमारे सेवा पेज पर जाएं या आवश्यक दस्तावेजों के साथ नगरपालिका कार्यालय का दौरा करें।",
		Intent.BILL: "आप हमारे सेवा पेज के माध्यम से या किसी भी अधिकृत संग्रह केंद्र पर अपने नगरपालिका बिल का ऑनलाइन भुगतान कर सकते हैं।",
		Intent.WASTE_INFO: "खाद्य कचरे के सही निपटान के लिए हम उसकी खाद बनाने की सलाह देते हैं। निगम रियायती दर पर खाद के डिब्बे उपलब्ध कराता है।",
		Intent.RECYCLE_INFO: "कृपया पुनर्चक्रण योग्य कचरे (प्लास्टिक, कागज, कांच) को सामान्य कचरे से अलग रखें। संग्रह हर मंगलवार और शुक्रवार को होता है।",
		Intent.TAX: "संपत्ति कर का भुगतान ऑनलाइन या निर्धारित संग्रह केंद्रों पर किया जा सकता है। अगली नियत तिथि 30 जून है। देर से भुगतान पर 2% मासिक जुर्माना लगता है।",
		Intent.PERMIT: "भवन निर्माण परमिट के लिए हमारे नगरपालिका पोर्टल पर ऑनलाइन आवेदन किया जा सकता है। प्रक्रिया में आमतौर पर 15-20 कार्य दिवस लगते हैं।",
		Intent.ORGANIC_WASTE: "यह जैविक कचरा लगता है। बचा हुआ खाना, छिलके और बगीचे के पत्ते सड़नशील हैं और हरे डिब्बे में जाते हैं। आप घर पर इनकी खाद भी बना सकते हैं; निगम रियायती खाद डिब्बे उपलब्ध कराता है।",
		Intent.RECYCLABLE_WASTE: "यह पुनर्चक्रण योग्य कचरा लगता है। साफ प्लास्टिक, कागज, कांच और धातु गैर-सड़नशील हैं और नीले डिब्बे में जाते हैं। संग्रह हर मंगलवार और शुक्रवार को होता है।",
		Intent.HAZARDOUS_WASTE: "यह खतरनाक कचरा लगता है। बैटरी, रसायन, पेंट, दवाइयाँ और ई-कचरा सामान्य डिब्बों में न डालें। कृपया इन्हें निकटतम खतरनाक कचरा संग्रह केंद्र पर जमा करें या विशेष पिकअप का अनुरोध करें।",
		Intent.UNKNOWN: "क्षमा करें, मेरे पास इस बारे में जानकारी नहीं है। सहायता के लिए कृपया हमारे हेल्पडेस्क से संपर्क करें।",
	},
	complaint_labels={Intent.GARBAGE: "कचरा", Intent.WATER: "पानी", Intent.ROAD: "सड़क"},
	status_update="अपडेट: आपकी {category} शिकायत हमारी फील्ड टीम को सौंप दी गई है। वे जल्द ही स्थान पर पहुंचेंगे।",
	photo_ack="छवि के लिए धन्यवाद। मैं देख सकता हूँ कि यह एक ऐसी समस्या है जिस पर ध्यान देने की आवश्यकता है। मैंने इस शिकायत को उच्च प्राथमिकता के साथ दर्ज किया है। 24 घंटे के भीतर समाधान की उम्मीद करें। आपका ट्रैकिंग आईडी है #MC-2023-",
	letter_intro="यह एक शिकायत पत्र है जिसे आप भरकर नगरपालिका कार्यालय में जमा कर सकते हैं:",
	complaint_letter=_COMPLAINT_LETTER_HI,
	complaint_summary="शिकायत: {issue}, स्थान: {loc}",
	complaint_sentence="मैं {location} पर {type} समस्या की शिकायत करना चाहता/चाहती हूँ। {description}",
	default_location="फोटो में दिखाया गया स्थान",
	analyzing="🔍 कचरे के प्रकार की पहचान के लिए आपकी छवि का विश्लेषण किया जा रहा है...",
	analysis_result="कचरा विश्लेषण पूर्ण! पहचाना गया: {detected}। यह {waste_type} कचरा है, कृपया इसे {bin} डिब्बे में डालें। विश्वसनीयता: {confidence}%।",
	analysis_unknown="मैं इस कचरे की पहचान विश्वास के साथ नहीं कर सका (विश्वसनीयता: {confidence}%)। कृपया इसे संग्रह टीम के लिए अलग रखें या इसका विवरण लिखकर भेजें।",
	analysis_failed="क्षमा करें, मैं इस छवि का विश्लेषण नहीं कर सका। कृपया फिर से प्रयास करें या समस्या का विवरण लिखकर भेजें।",
	analysis_superseded="यह विश्लेषण आपकी नई फोटो से बदल दिया गया।",
	bin_labels={BinType.GREEN: "हरे", BinType.BLUE: "नीले", BinType.UNKNOWN: "अज्ञात"},
	waste_labels={
		WasteType.DECOMPOSABLE: "सड़नशील",
		WasteType.NON_DECOMPOSABLE: "गैर-सड़नशील",
		WasteType.UNKNOWN: "अज्ञात",
	},
	reward="🎉 कचरे को सही तरीके से अलग करने के लिए आपने {points} इको-पॉइंट्स अर्जित किए! ऐसे ही जारी रखें।",
	attach_prompt="कृपया इस कचरे की पहचान करें और बताएं कि इसका निपटान कैसे करें।",
	notifications={
		"language_changed": Notification("भाषा बदली गई", "अब हिंदी में चैट करें"),
		"image_attached": Notification("छवि संलग्न", "आपकी छवि चैट में संलग्न कर दी गई है।"),
		"image_analysis_complete": Notification("छवि विश्लेषण पूर्ण", "समस्या पहचानी और दर्ज की गई"),
		"waste_analysis_complete": Notification("कचरा विश्लेषण पूर्ण", "आपके कचरे का वर्गीकरण हो गया है"),
		"waste_analysis_failed": Notification("विश्लेषण विफल", "हम आपकी छवि का विश्लेषण नहीं कर सके", "warning"),
		"eco_points": Notification("इको-पॉइंट्स मिले", "आपके खाते में +{points} इको-पॉइंट्स जोड़े गए"),
		"unsupported_type": Notification("अमान्य फ़ाइल", "कृपया एक छवि फ़ाइल संलग्न करें।", "warning"),
		"too_large": Notification("फ़ाइल बहुत बड़ी है", "कृपया 5 MB से छोटी छवि संलग्न करें।", "warning"),
		"empty": Notification("अमान्य फ़ाइल", "चुनी गई छवि खाली है।", "warning"),
		"already_attached": Notification("छवि पहले से संलग्न", "दूसरी छवि जोड़ने से पहले वर्तमान छवि हटाएं।", "warning"),
	},
)

PACKS: Dict[Language, LanguagePack] = {Language.ENGLISH: ENGLISH, Language.HINDI: HINDI}

if set(PACKS) != set(Language):
	raise RuntimeError("Every supported language needs a LanguagePack.")


def pack_for(language: Language) -> LanguagePack:
	return PACKS[language]
