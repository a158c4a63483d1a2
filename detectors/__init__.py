"""Signal extraction and pattern detection modules."""

from .signals import Signal, make_signal, triggered_only

from .vendor import (
    VendorSignalExtractor,
    detect_high_volume,
    detect_high_value,
    detect_incomplete_documentation,
    detect_price_above_market,
    detect_unknown_vendor,
    detect_unattributed,
)

from .document import (
    DocumentSignalExtractor,
    find_duplicates,
    missing_fields,
    vendor_transactions,
)

from .news import (
    ArticleContext,
    NewsSignalExtractor,
)

from .patterns import (
    Pattern,
    DepartmentCluster,
    INVOICE_SPLITTING_ISSUE,
    vendor_key,
    vendor_name_index,
    normalize_name,
    resolve_vendor_id,
    detect_invoice_splitting,
    detect_multiple_department_payments,
    detect_rapid_transaction_sequence,
    detect_duplicate_submissions,
    build_department_clusters,
    analyze_batch_patterns,
)

__all__ = [
    # Signals
    "Signal",
    "make_signal",
    "triggered_only",
    # Vendor / transactions
    "VendorSignalExtractor",
    "detect_high_volume",
    "detect_high_value",
    "detect_incomplete_documentation",
    "detect_price_above_market",
    "detect_unknown_vendor",
    "detect_unattributed",
    # Documents
    "DocumentSignalExtractor",
    "find_duplicates",
    "missing_fields",
    "vendor_transactions",
    # News
    "ArticleContext",
    "NewsSignalExtractor",
    # Patterns
    "Pattern",
    "DepartmentCluster",
    "INVOICE_SPLITTING_ISSUE",
    "vendor_key",
    "vendor_name_index",
    "normalize_name",
    "resolve_vendor_id",
    "detect_invoice_splitting",
    "detect_multiple_department_payments",
    "detect_rapid_transaction_sequence",
    "detect_duplicate_submissions",
    "build_department_clusters",
    "analyze_batch_patterns",
]
