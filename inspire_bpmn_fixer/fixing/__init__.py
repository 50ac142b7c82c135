"""
Fixing Framework
================

Provides the abstract fixer interface and the BPM Inspire implementation
that makes BPMN exports loadable by Camunda Platform 7.

Components:
- BaseFixer: Abstract base class walking every element of a document
- FixResult: Container for fix results
- InspireBPMNFixer: Expression tag conversion and QName prefixing
"""

from inspire_bpmn_fixer.fixing.base import (
    BaseFixer,
    FixResult,
)

from inspire_bpmn_fixer.fixing.inspire_fixer import (
    InspireBPMNFixer,
    FIX_EXPRESSION_TAG,
    FIX_TEXT_QNAME,
    FIX_ATTRIBUTE_QNAME,
)

__all__ = [
    # Base classes
    "BaseFixer",
    "FixResult",
    # BPM Inspire fixing
    "InspireBPMNFixer",
    "FIX_EXPRESSION_TAG",
    "FIX_TEXT_QNAME",
    "FIX_ATTRIBUTE_QNAME",
]
