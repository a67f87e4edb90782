"""
Pre-built discipline referral templates.

Each template pre-fills category, severity, description (with [placeholder]
markers the teacher must replace) and a suggested intervention.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class PromptTemplate:
    id: str
    display_name: str
    category: str
    default_severity: str
    description_template: str
    suggested_intervention: str
    requires_admin_referral: bool = False

    @property
    def has_placeholders(self) -> bool:
        return "[" in self.description_template


TEMPLATES = (
    PromptTemplate(
        "CLASSROOM_DISRUPTION", "Classroom Disruption", "DISRUPTION", "MINOR",
        "Student engaged in behavior that materially and substantially disrupted the educational "
        "process, including [specific behavior]. This behavior interfered with the learning "
        "environment and the rights of other students to receive instruction.",
        "Verbal warning; student conference; seat reassignment; parent contact if repeated.",
    ),
    PromptTemplate(
        "HORSEPLAY", "Horseplay / Unsafe Physical Contact", "FIGHTING", "MINOR",
        "Student engaged in physical contact not intended to cause bodily harm but which posed a "
        "safety risk, including rough or boisterous play. This behavior violated school safety "
        "expectations and could have resulted in injury.",
        "Verbal warning; loss of privilege; parent notification; behavior contract if repeated.",
    ),
    PromptTemplate(
        "PROFANE_LANGUAGE", "Inappropriate / Profane Language", "INAPPROPRIATE_LANGUAGE", "MODERATE",
        "Student used language that was profane, vulgar, obscene, or otherwise inappropriate for "
        "the school setting, directed toward [peers/staff/general use]. This constitutes a "
        "violation of the Student Code of Conduct regarding respectful communication.",
        "Student conference; written reflection; parent contact; referral if directed at staff.",
    ),
    PromptTemplate(
        "DEFIANCE_INSUBORDINATION", "Defiance / Insubordination", "DEFIANCE", "MODERATE",
        "Student willfully refused to comply with a reasonable and lawful directive issued by "
        "authorized school personnel. Specific directive given: [directive]. Student's response: "
        "[response]. This constitutes insubordination under the Student Code of Conduct.",
        "Student conference; parent contact; behavior contract; progressive discipline referral.",
    ),
    PromptTemplate(
        "PERSISTENT_NON_COMPLIANCE", "Persistent Non-Compliance", "NON_COMPLIANCE", "MINOR",
        "Student repeatedly failed to follow established classroom rules and expectations despite "
        "verbal redirection and documented interventions. Specific expectations not met: "
        "[expectations].",
        "Documented verbal warnings; parent contact; behavior improvement plan; team conference.",
    ),
    PromptTemplate(
        "BULLYING_INTIMIDATION", "Bullying / Intimidation", "BULLYING", "MAJOR",
        "Student engaged in behavior constituting bullying as defined under state education code: "
        "repeated or severe conduct directed at another student that exploits an imbalance of "
        "power and creates a hostile educational environment. Specific behavior: [behavior]. "
        "Impact on target student: [impact].",
        "Immediate admin referral; separation of students; counselor involvement; parent "
        "conference; safety plan.",
        True,
    ),
    PromptTemplate(
        "PHYSICAL_AGGRESSION", "Physical Aggression / Fighting", "FIGHTING", "MAJOR",
        "Student initiated or engaged in physical aggression toward another individual on school "
        "grounds/at a school-sponsored event. This incident is documented in accordance with "
        "district policy and applicable state law. Description of physical contact: [description].",
        "Immediate admin referral; separation of involved parties; nurse check if injury; parent "
        "notification; possible SRO involvement.",
        True,
    ),
    PromptTemplate(
        "HARASSMENT_GENERAL", "Harassment (General)", "HARASSMENT", "MAJOR",
        "Student engaged in unwelcome conduct that was sufficiently severe, pervasive, or "
        "persistent so as to create a hostile educational environment for the affected "
        "individual(s). Nature of conduct: [description]. This may constitute a violation of "
        "federal civil rights protections.",
        "Immediate admin referral; Title IX coordinator notification if applicable; separation of "
        "parties; counselor support for target.",
        True,
    ),
    PromptTemplate(
        "ACADEMIC_DISHONESTY", "Academic Dishonesty", "OTHER", "MODERATE",
        "Student engaged in academic dishonesty including but not limited to: [plagiarism/"
        "unauthorized collaboration/use of prohibited materials/submission of work not their own] "
        "during [assignment/assessment]. Evidence: [evidence]. This violates the Academic "
        "Integrity Policy.",
        "Zero on assignment; parent contact; academic integrity conference; notation in student record.",
    ),
    PromptTemplate(
        "TECHNOLOGY_AUP_VIOLATION", "Technology / AUP Violation", "TECHNOLOGY_MISUSE", "MINOR",
        "Student violated the district Acceptable Use Policy (AUP) by: [specific violation]. "
        "Device involved: [school-issued/personal]. This constitutes misuse of technology "
        "resources as defined in the signed AUP agreement.",
        "Device confiscation for remainder of period; parent notification; technology privilege "
        "restriction if repeated.",
    ),
    PromptTemplate(
        "DRESS_CODE_VIOLATION", "Dress Code Violation", "DRESS_CODE_VIOLATION", "MINOR",
        "Student was found in violation of the district dress code as outlined in the Student "
        "Handbook. Specific violation: [description]. Student was given the opportunity to "
        "correct the violation.",
        "Opportunity to change; loaner clothing if available; parent contact if unresolved.",
    ),
    PromptTemplate(
        "TARDINESS", "Tardiness", "TARDINESS", "MINOR",
        "Student arrived to [class/school] at [time], which is [X] minutes after the designated "
        "start time, without an authorized excuse. This is the student's [Nth] documented tardy "
        "this [term/semester].",
        "Documented warning; parent notification after 3rd occurrence; detention after 5th; admin "
        "referral after repeated pattern.",
    ),
    PromptTemplate(
        "VANDALISM", "Vandalism / Property Damage", "VANDALISM", "MODERATE",
        "Student willfully damaged, defaced, or destroyed [school property/personal property of "
        "another]. Description of damage: [description]. Estimated value: [if applicable]. "
        "Restitution may be pursued in accordance with district policy and state law.",
        "Admin referral; restitution assessment; parent conference; possible law enforcement "
        "referral for significant damage.",
    ),
    PromptTemplate(
        "THEFT", "Theft", "THEFT", "MAJOR",
        "Student is alleged to have taken or attempted to take property belonging to [another "
        "student/staff member/the school district] without authorization. Item(s): [description]. "
        "Circumstances: [description]. This matter may be referred to law enforcement per "
        "district policy.",
        "Immediate admin referral; secure any recovered property; document all witness "
        "statements; parent notification; possible SRO involvement.",
        True,
    ),
)


def get_by_id(template_id):
    key = (template_id or "").upper()
    for t in TEMPLATES:
        if t.id == key:
            return t
    return None


def get_by_category(category):
    key = (category or "").upper()
    return [t for t in TEMPLATES if t.category == key]
