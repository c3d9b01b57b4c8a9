"""
Closed vocabulary of service types offered by providers.

Each member carries its own default duration, label, category and
description, so adding a service type without a duration is impossible.
"""

from enum import Enum
from typing import List


class ServiceCategory(str, Enum):
    """Grouping of related service types."""
    THERAPY = "THERAPY"
    HOME_CARE = "HOME_CARE"
    SUPPORT_SERVICES = "SUPPORT_SERVICES"
    MEDICAL = "MEDICAL"
    ASSESSMENT = "ASSESSMENT"


class ServiceType(str, Enum):
    """
    Service categories a provider can be booked for.

    Members are looked up by their wire value, e.g.
    ``ServiceType("physical_therapy")``.
    """

    def __new__(cls, value: str, default_duration: int, label: str,
                category: ServiceCategory, description: str):
        obj = str.__new__(cls, value)
        obj._value_ = value
        obj.default_duration = default_duration  # minutes
        obj.label = label
        obj.category = category
        obj.description = description
        return obj

    PHYSICAL_THERAPY = (
        "physical_therapy", 60, "Physical Therapy", ServiceCategory.THERAPY,
        "Therapeutic exercises and techniques to help patients regain or improve "
        "physical abilities, mobility, and strength.",
    )
    OCCUPATIONAL_THERAPY = (
        "occupational_therapy", 60, "Occupational Therapy", ServiceCategory.THERAPY,
        "Therapy focused on helping individuals develop, recover, and maintain the "
        "skills needed for daily living and working.",
    )
    SPEECH_THERAPY = (
        "speech_therapy", 45, "Speech Therapy", ServiceCategory.THERAPY,
        "Assessment and treatment of communication problems and speech disorders.",
    )
    BEHAVIORAL_THERAPY = (
        "behavioral_therapy", 50, "Behavioral Therapy", ServiceCategory.THERAPY,
        "Therapy focused on identifying and changing unhealthy behaviors and "
        "improving emotional regulation.",
    )
    COUNSELING = (
        "counseling", 50, "Counseling", ServiceCategory.THERAPY,
        "Professional guidance to address emotional, mental, or behavioral issues.",
    )
    HOME_HEALTH_AIDE = (
        "home_health_aide", 120, "Home Health Aide", ServiceCategory.HOME_CARE,
        "Assistance with health-related tasks, personal care, and light household duties.",
    )
    PERSONAL_CARE_ASSISTANT = (
        "personal_care_assistant", 120, "Personal Care Assistant", ServiceCategory.HOME_CARE,
        "Non-medical assistance with daily activities such as bathing and dressing.",
    )
    RESPITE_CARE = (
        "respite_care", 240, "Respite Care", ServiceCategory.HOME_CARE,
        "Temporary relief for primary caregivers.",
    )
    TRANSPORTATION = (
        "transportation", 60, "Transportation", ServiceCategory.SUPPORT_SERVICES,
        "Non-emergency transportation to appointments and essential activities.",
    )
    MEAL_DELIVERY = (
        "meal_delivery", 30, "Meal Delivery", ServiceCategory.SUPPORT_SERVICES,
        "Preparation and delivery of nutritious meals.",
    )
    NUTRITIONAL_COUNSELING = (
        "nutritional_counseling", 45, "Nutritional Counseling", ServiceCategory.SUPPORT_SERVICES,
        "Guidance on nutrition and dietary choices.",
    )
    MEDICATION_MANAGEMENT = (
        "medication_management", 30, "Medication Management", ServiceCategory.MEDICAL,
        "Medication reviews, organization, and reminders.",
    )
    ASSISTIVE_TECHNOLOGY = (
        "assistive_technology", 60, "Assistive Technology", ServiceCategory.SUPPORT_SERVICES,
        "Assessment and training on devices that increase functional capabilities.",
    )
    HOME_MODIFICATION = (
        "home_modification", 120, "Home Modification", ServiceCategory.HOME_CARE,
        "Structural changes to homes to improve accessibility and safety.",
    )
    VOCATIONAL_REHABILITATION = (
        "vocational_rehabilitation", 60, "Vocational Rehabilitation",
        ServiceCategory.SUPPORT_SERVICES,
        "Help preparing for, obtaining, or regaining employment.",
    )
    RECREATIONAL_THERAPY = (
        "recreational_therapy", 60, "Recreational Therapy", ServiceCategory.THERAPY,
        "Therapy using recreational activities to maintain overall well-being.",
    )
    SUPPORT_GROUP = (
        "support_group", 90, "Support Group", ServiceCategory.SUPPORT_SERVICES,
        "Organized meetings for people with similar experiences.",
    )
    CASE_MANAGEMENT = (
        "case_management", 45, "Case Management", ServiceCategory.ASSESSMENT,
        "Coordination of services and resources to meet health and human service needs.",
    )
    INITIAL_ASSESSMENT = (
        "initial_assessment", 90, "Initial Assessment", ServiceCategory.ASSESSMENT,
        "Comprehensive evaluation of health status, needs, and recommended services.",
    )
    FOLLOW_UP_CONSULTATION = (
        "follow_up_consultation", 30, "Follow-up Consultation", ServiceCategory.ASSESSMENT,
        "Subsequent appointment to review progress and adjust care plans.",
    )


def get_service_types_by_category(category: ServiceCategory) -> List[ServiceType]:
    """Return all service types in a category, in declaration order."""
    return [service_type for service_type in ServiceType if service_type.category is category]


def get_all_service_types() -> List[ServiceType]:
    return list(ServiceType)
