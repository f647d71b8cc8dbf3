"""Optional library detection with graceful degradation"""

from typing import Dict, Optional
from dataclasses import dataclass

from stegascan.core.constants import PYTHON_PACKAGES
from stegascan.core.logging import get_logger

logger = get_logger()


@dataclass
class DependencyStatus:
    name: str
    available: bool
    required: bool = False
    version: Optional[str] = None
    error: Optional[str] = None


def check_python_package(package_name: str, import_name: Optional[str] = None) -> DependencyStatus:
    """Check if a Python package is available"""
    import_name = import_name or package_name
    pkg_info = PYTHON_PACKAGES.get(package_name, {})

    try:
        module = __import__(import_name)
        version = getattr(module, '__version__', None)
        return DependencyStatus(
            name=package_name,
            available=True,
            required=pkg_info.get("required", False),
            version=version,
        )
    except (ImportError, OSError) as e:
        return DependencyStatus(
            name=package_name,
            available=False,
            required=pkg_info.get("required", False),
            error=str(e),
        )


def check_all_dependencies(verbose: bool = False) -> Dict[str, DependencyStatus]:
    """Check all known Python packages and return their status"""
    results = {}

    for pkg_key, pkg_info in PYTHON_PACKAGES.items():
        import_name = pkg_info.get("import_name", pkg_key)
        status = check_python_package(pkg_key, import_name)
        results[pkg_key] = status

        if verbose:
            if status.available:
                version_str = f" ({status.version})" if status.version else ""
                logger.info(f"  [OK] {pkg_info['name']}{version_str}")
            elif pkg_info.get("required"):
                logger.error(f"  [MISSING] {pkg_info['name']} (REQUIRED)")
            else:
                logger.warning(f"  [MISSING] {pkg_info['name']} (optional)")

    return results


def get_install_instructions(package: str) -> Optional[str]:
    """Get installation instructions for a package"""
    pkg_info = PYTHON_PACKAGES.get(package)
    if pkg_info:
        return pkg_info.get("install")
    return None


def require_dependency(package: str, feature: str = "this feature"):
    """Raise error if an optional package is not importable"""
    from stegascan.core.exceptions import DependencyMissingError

    pkg_info = PYTHON_PACKAGES.get(package, {})
    import_name = pkg_info.get("import_name", package)
    status = check_python_package(package, import_name)

    if not status.available:
        install_hint = get_install_instructions(package)
        raise DependencyMissingError(
            dependency=status.name,
            install_hint=f"{feature} requires {status.name}.\n{install_hint}" if install_hint else None
        )


def print_missing_dependencies(results: Dict[str, DependencyStatus]) -> bool:
    """Print missing dependencies with install instructions

    Returns False when a required package is missing.
    """
    missing_required = [s for s in results.values() if not s.available and s.required]
    missing_optional = [s for s in results.values() if not s.available and not s.required]

    if missing_required:
        print("\nMISSING REQUIRED DEPENDENCIES:")
        print("=" * 60)
        for status in missing_required:
            print(f"\n{status.name}")
            install = get_install_instructions(status.name)
            if install:
                print(f"  Install: {install}")
        print("\nPlease install required dependencies before using stegascan.")
        return False

    if missing_optional:
        print("\nOPTIONAL DEPENDENCIES NOT FOUND:")
        print("=" * 60)
        print("These are not required but enable additional features.\n")

        for status in missing_optional:
            print(f"{status.name}")
            features = PYTHON_PACKAGES.get(status.name, {}).get("features", [])
            if features:
                print(f"  Enables: {', '.join(features)}")
            install = get_install_instructions(status.name)
            if install:
                print(f"  Install: {install}")
            print()

    return True
