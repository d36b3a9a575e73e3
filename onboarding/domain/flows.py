from enum import Enum

from onboarding.domain.flow import FlowConfig


class SignupState(str, Enum):
    PHONE = "phone"
    OTP = "otp"
    ROLE = "role"
    INVESTOR = "investor"
    EXPERT = "expert"


class SignupEvent(str, Enum):
    OTP_SENT = "OTP_SENT"
    OTP_VERIFIED = "OTP_VERIFIED"
    BACK = "BACK"


class Role(str, Enum):
    INVESTOR = "investor"
    EXPERT = "expert"


class WizardEvent(str, Enum):
    NEXT = "NEXT"
    BACK = "BACK"


class InvestorStep(str, Enum):
    BASIC = "basic"
    CONTENT = "content"
    RISK = "risk"
    GENERATED = "generated"


class ExpertStep(str, Enum):
    BASIC = "basic"
    SPECIALIZATIONS = "specializations"
    PERSONA = "persona"
    GENERATED = "generated"


# Role pages are reached with go() only.
SIGNUP_FLOW: FlowConfig[SignupState, SignupEvent] = FlowConfig(
    initial=SignupState.PHONE,
    transitions={
        SignupState.PHONE: {SignupEvent.OTP_SENT: SignupState.OTP},
        SignupState.OTP: {
            SignupEvent.OTP_VERIFIED: SignupState.ROLE,
            SignupEvent.BACK: SignupState.PHONE,
        },
        SignupState.ROLE: {},
        SignupState.INVESTOR: {},
        SignupState.EXPERT: {},
    },
)

INVESTOR_FLOW: FlowConfig[InvestorStep, WizardEvent] = FlowConfig(
    initial=InvestorStep.BASIC,
    transitions={
        InvestorStep.BASIC: {WizardEvent.NEXT: InvestorStep.CONTENT},
        InvestorStep.CONTENT: {
            WizardEvent.BACK: InvestorStep.BASIC,
            WizardEvent.NEXT: InvestorStep.RISK,
        },
        InvestorStep.RISK: {
            WizardEvent.BACK: InvestorStep.CONTENT,
            WizardEvent.NEXT: InvestorStep.GENERATED,
        },
        InvestorStep.GENERATED: {WizardEvent.BACK: InvestorStep.RISK},
    },
)

EXPERT_FLOW: FlowConfig[ExpertStep, WizardEvent] = FlowConfig(
    initial=ExpertStep.BASIC,
    transitions={
        ExpertStep.BASIC: {WizardEvent.NEXT: ExpertStep.SPECIALIZATIONS},
        ExpertStep.SPECIALIZATIONS: {
            WizardEvent.BACK: ExpertStep.BASIC,
            WizardEvent.NEXT: ExpertStep.PERSONA,
        },
        ExpertStep.PERSONA: {
            WizardEvent.BACK: ExpertStep.SPECIALIZATIONS,
            WizardEvent.NEXT: ExpertStep.GENERATED,
        },
        ExpertStep.GENERATED: {WizardEvent.BACK: ExpertStep.PERSONA},
    },
)


def signup_config(*, otp_sent: bool = False, otp_verified: bool = False) -> FlowConfig[SignupState, SignupEvent]:
    """Sign-up flow resuming at the step matching what was already done."""
    if otp_verified:
        initial = SignupState.ROLE
    elif otp_sent:
        initial = SignupState.OTP
    else:
        initial = SignupState.PHONE
    return FlowConfig(initial=initial, transitions=SIGNUP_FLOW.transitions)
