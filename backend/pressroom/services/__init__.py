"""Services layer - Business logic and orchestration.

Services implement the compliance, generation and workflow use cases. They
contain no direct HTTP access - Claude calls are delegated to
pressroom.integrations.
"""

from pressroom.services.brief_expansion import (
    BriefExpansionService,
    get_brief_expansion_service,
)
from pressroom.services.compliance import (
    ComplianceCheckResult,
    ComplianceService,
    get_compliance_service,
)
from pressroom.services.content_generation import (
    ContentGenerationService,
    ContentVariant,
    GeneratedContent,
    get_content_generation_service,
)
from pressroom.services.realtime_compliance import DebouncedComplianceChecker
from pressroom.services.title_enhancement import (
    TitleEnhancementService,
    get_title_enhancement_service,
)
from pressroom.services.tone_adjustment import (
    ToneAdjustment,
    ToneAdjustmentService,
    get_tone_adjustment_service,
)

__all__ = [
    # Briefs
    "BriefExpansionService",
    "get_brief_expansion_service",
    # Compliance
    "ComplianceCheckResult",
    "ComplianceService",
    "get_compliance_service",
    # Generation
    "ContentGenerationService",
    "ContentVariant",
    "GeneratedContent",
    "get_content_generation_service",
    # Realtime
    "DebouncedComplianceChecker",
    # Titles
    "TitleEnhancementService",
    "get_title_enhancement_service",
    # Tone
    "ToneAdjustment",
    "ToneAdjustmentService",
    "get_tone_adjustment_service",
]
