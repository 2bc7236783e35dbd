"""Default framework requirement catalog and check mappings.

``REQUIREMENTS`` lists every requirement a framework report covers, as
``requirement_id -> (title, category)``. Requirements that no check maps to
are reported as MANUAL (they need human attestation).

``MAPPINGS`` maps an internal check key to at most one requirement per
framework.
"""

REQUIREMENTS: dict[str, dict[str, tuple[str, str]]] = {
    "soc2": {
        "CC1.1": ("Integrity and Ethical Values", "Control Environment"),
        "CC2.1": ("Quality Information for Internal Control", "Communication and Information"),
        "CC3.1": ("Risk Assessment Objectives", "Risk Assessment"),
        "CC6.1": ("Logical Access Security", "Logical and Physical Access"),
        "CC6.3": ("Encryption of Data at Rest", "Logical and Physical Access"),
        "CC6.6": ("Boundary Protection", "Logical and Physical Access"),
        "CC6.7": ("Encryption of Data in Transit", "Logical and Physical Access"),
        "CC7.1": ("Vulnerability and Configuration Management", "System Operations"),
        "CC7.2": ("System Monitoring", "System Operations"),
        "A1.2": ("Backup and Recovery", "Availability"),
    },
    "pci-dss": {
        "1.3": ("Prohibit Direct Public Access", "Network Security"),
        "3.4": ("Render Stored Data Unreadable", "Protect Stored Data"),
        "4.1": ("Strong Cryptography in Transit", "Protect Data in Transit"),
        "6.2": ("Security Patches", "Secure Systems"),
        "7.1": ("Limit Access to System Components", "Access Control"),
        "10.2": ("Audit Trails", "Logging and Monitoring"),
        "12.1": ("Information Security Policy", "Security Policy"),
    },
    "hipaa": {
        "164.308(a)(1)(ii)(A)": ("Risk Analysis", "Administrative Safeguards"),
        "164.308(a)(5)(ii)(B)": ("Protection from Malicious Software", "Administrative Safeguards"),
        "164.308(a)(7)(ii)(A)": ("Data Backup Plan", "Administrative Safeguards"),
        "164.312(a)(1)": ("Access Control", "Technical Safeguards"),
        "164.312(a)(2)(iv)": ("Encryption and Decryption", "Technical Safeguards"),
        "164.312(b)": ("Audit Controls", "Technical Safeguards"),
        "164.312(d)": ("Person or Entity Authentication", "Technical Safeguards"),
        "164.312(e)(1)": ("Transmission Security", "Technical Safeguards"),
    },
    "iso-27001": {
        "A.5.1.1": ("Policies for Information Security", "Information Security Policies"),
        "A.9.4.1": ("Information Access Restriction", "Access Control"),
        "A.10.1.1": ("Policy on the Use of Cryptographic Controls", "Cryptography"),
        "A.12.3.1": ("Information Backup", "Operations Security"),
        "A.12.4.1": ("Event Logging", "Operations Security"),
        "A.12.6.1": ("Management of Technical Vulnerabilities", "Operations Security"),
        "A.13.1.1": ("Network Controls", "Communications Security"),
        "A.13.2.1": ("Information Transfer Policies", "Communications Security"),
    },
    "nist-800-53": {
        "AC-3": ("Access Enforcement", "Access Control"),
        "AU-2": ("Event Logging", "Audit and Accountability"),
        "CP-9": ("System Backup", "Contingency Planning"),
        "PL-2": ("System Security Plan", "Planning"),
        "SC-7": ("Boundary Protection", "System and Communications Protection"),
        "SC-8": ("Transmission Confidentiality and Integrity", "System and Communications Protection"),
        "SC-28": ("Protection of Information at Rest", "System and Communications Protection"),
        "SI-2": ("Flaw Remediation", "System and Information Integrity"),
    },
    "cmmc": {
        "AC.L1-3.1.1": ("Authorized Access Control", "Access Control"),
        "AT.L2-3.2.1": ("Role-Based Risk Awareness", "Awareness and Training"),
        "AU.L2-3.3.1": ("System Auditing", "Audit and Accountability"),
        "MP.L2-3.8.9": ("Protect Backups", "Media Protection"),
        "SC.L1-3.13.1": ("Boundary Protection", "System and Communications Protection"),
        "SC.L2-3.13.8": ("Data in Transit", "System and Communications Protection"),
        "SC.L2-3.13.16": ("Data at Rest", "System and Communications Protection"),
        "SI.L1-3.14.1": ("Flaw Remediation", "System and Information Integrity"),
    },
}

_ENCRYPTION_AT_REST = {
    "soc2": "CC6.3",
    "pci-dss": "3.4",
    "hipaa": "164.312(a)(2)(iv)",
    "iso-27001": "A.10.1.1",
    "nist-800-53": "SC-28",
    "cmmc": "SC.L2-3.13.16",
}

_ENCRYPTION_IN_TRANSIT = {
    "soc2": "CC6.7",
    "pci-dss": "4.1",
    "hipaa": "164.312(e)(1)",
    "iso-27001": "A.13.2.1",
    "nist-800-53": "SC-8",
    "cmmc": "SC.L2-3.13.8",
}

_NETWORK_EXPOSURE = {
    "soc2": "CC6.6",
    "pci-dss": "1.3",
    "hipaa": "164.312(a)(1)",
    "iso-27001": "A.13.1.1",
    "nist-800-53": "SC-7",
    "cmmc": "SC.L1-3.13.1",
}

_AUDIT_LOGGING = {
    "soc2": "CC7.2",
    "pci-dss": "10.2",
    "hipaa": "164.312(b)",
    "iso-27001": "A.12.4.1",
    "nist-800-53": "AU-2",
    "cmmc": "AU.L2-3.3.1",
}

_PATCHING = {
    "soc2": "CC7.1",
    "pci-dss": "6.2",
    "hipaa": "164.308(a)(5)(ii)(B)",
    "iso-27001": "A.12.6.1",
    "nist-800-53": "SI-2",
    "cmmc": "SI.L1-3.14.1",
}

# PCI-DSS has no backup requirement.
_BACKUP = {
    "soc2": "A1.2",
    "hipaa": "164.308(a)(7)(ii)(A)",
    "iso-27001": "A.12.3.1",
    "nist-800-53": "CP-9",
    "cmmc": "MP.L2-3.8.9",
}

_ACCESS_CONTROL = {
    "soc2": "CC6.1",
    "pci-dss": "7.1",
    "hipaa": "164.312(d)",
    "iso-27001": "A.9.4.1",
    "nist-800-53": "AC-3",
    "cmmc": "AC.L1-3.1.1",
}

MAPPINGS: dict[str, dict[str, str]] = {
    # Redshift
    "REDSHIFT_ENCRYPTION": _ENCRYPTION_AT_REST,
    "REDSHIFT_NETWORK": _NETWORK_EXPOSURE,
    "REDSHIFT_LOGGING": _AUDIT_LOGGING,
    "REDSHIFT_SSL": _ENCRYPTION_IN_TRANSIT,
    "REDSHIFT_PATCHING": _PATCHING,
    "REDSHIFT_BACKUP": _BACKUP,
    # ElastiCache
    "ELASTICACHE_ENCRYPTION": _ENCRYPTION_AT_REST,
    "ELASTICACHE_TRANSIT": _ENCRYPTION_IN_TRANSIT,
    "ELASTICACHE_PATCHING": _PATCHING,
    "ELASTICACHE_AUTH": _ACCESS_CONTROL,
    "ELASTICACHE_BACKUP": _BACKUP,
    # OpenSearch
    "OPENSEARCH_ENCRYPTION": _ENCRYPTION_AT_REST,
    "OPENSEARCH_TRANSIT": _ENCRYPTION_IN_TRANSIT,
    "OPENSEARCH_HTTPS": _ENCRYPTION_IN_TRANSIT,
    "OPENSEARCH_NETWORK": _NETWORK_EXPOSURE,
    "OPENSEARCH_LOGGING": _AUDIT_LOGGING,
    "OPENSEARCH_ACCESS": _ACCESS_CONTROL,
    # SageMaker
    "SAGEMAKER_ENCRYPTION": _ENCRYPTION_AT_REST,
    "SAGEMAKER_NETWORK": _NETWORK_EXPOSURE,
    "SAGEMAKER_ACCESS": _ACCESS_CONTROL,
}
