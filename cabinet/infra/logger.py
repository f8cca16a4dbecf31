# cabinet/infra/logger.py
"""
Système de logging des opérations du cabinet.

Ce module configure et fournit des loggers pour enregistrer les opérations
critiques: consultations (création, paiement, annulation), calcul des bilans,
accès à la base et événements système.
"""

import logging
import os
from pathlib import Path
from typing import Dict, Any, Optional


# Flag global pour activer/désactiver le logging (CABINET_LOGGING=1)
ENABLE_LOGGING = os.environ.get("CABINET_LOGGING", "0").strip().lower() in {"1", "true", "yes", "on"}

# Configuration de base des loggers
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logger(name: str, log_file: str, level: int = logging.INFO) -> logging.Logger:
    """
    Configure un logger avec un fichier de sortie.

    Args:
        name: Nom du logger
        log_file: Chemin du fichier de log
        level: Niveau de logging (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Returns:
        Logger configuré
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False

    # Retire les handlers existants
    while logger.handlers:
        logger.removeHandler(logger.handlers[0])

    # Le fichier n'est ouvert qu'au premier message
    if ENABLE_LOGGING:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(log_file, encoding='utf-8', delay=True)
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    logger.addHandler(file_handler)

    return logger


# Répertoire des logs (CABINET_LOG_DIR ou ./logs)
LOGS_DIR = Path(os.environ.get("CABINET_LOG_DIR", os.path.join(os.getcwd(), "logs")))

LOG_FILES = {
    "transactions": LOGS_DIR / "transactions.log",
    "consultations": LOGS_DIR / "consultations.log",
    "bilan": LOGS_DIR / "bilan.log",
    "database": LOGS_DIR / "database.log",
    "system": LOGS_DIR / "system.log",
}

transaction_logger = setup_logger('cabinet.transactions', str(LOG_FILES["transactions"]))
consultation_logger = setup_logger('cabinet.consultations', str(LOG_FILES["consultations"]))
bilan_logger = setup_logger('cabinet.bilan', str(LOG_FILES["bilan"]))
database_logger = setup_logger('cabinet.database', str(LOG_FILES["database"]))
system_logger = setup_logger('cabinet.system', str(LOG_FILES["system"]))

if not ENABLE_LOGGING:
    for _lg in (transaction_logger, consultation_logger, bilan_logger, database_logger, system_logger):
        _lg.disabled = True


def set_logging(enabled: bool) -> None:
    """Active ou désactive tous les loggers du cabinet à l'exécution."""
    global ENABLE_LOGGING
    ENABLE_LOGGING = enabled
    if enabled:
        LOGS_DIR.mkdir(parents=True, exist_ok=True)
    for lg in (transaction_logger, consultation_logger, bilan_logger, database_logger, system_logger):
        lg.disabled = not enabled


def log_transaction(operation: str, data: Dict[str, Any], result: Optional[Any] = None, error: Optional[str] = None) -> None:
    """
    Enregistre une transaction complète.

    Args:
        operation: Type d'opération (creer_consultation, valider_paiement...)
        data: Données de la transaction
        result: Résultat (optionnel)
        error: Message d'erreur (optionnel)
    """
    if not ENABLE_LOGGING:
        return
    if error:
        transaction_logger.error(f"TRANSACTION_FAILED: {operation} - {error} - Data: {data}")
    else:
        transaction_logger.info(f"TRANSACTION_SUCCESS: {operation} - Result: {result} - Data: {data}")


def log_consultation(action: str, consultation_id: Optional[int], **kwargs) -> None:
    """Log spécifique au cycle de vie d'une consultation."""
    if not ENABLE_LOGGING:
        return
    log_data = {"action": action, "consultation_id": consultation_id, **kwargs}
    consultation_logger.info(f"CONSULTATION_{action.upper()}: {log_data}")


def log_database_operation(table: str, operation: str, affected_rows: int = 0, **kwargs) -> None:
    """
    Log des opérations sur la base.

    Args:
        table: Nom de la table
        operation: Opération SQL (INSERT, UPDATE, DELETE, SELECT...)
        affected_rows: Nombre de lignes concernées
    """
    if not ENABLE_LOGGING:
        return
    log_data = {"table": table, "operation": operation, "affected_rows": affected_rows, **kwargs}
    database_logger.info(f"DB_{operation}: {log_data}")


def log_system_event(event: str, details: Dict[str, Any] = None, level: str = "info") -> None:
    """Log des événements système (level: info, warning, error)."""
    if not ENABLE_LOGGING:
        return
    log_data = {"event": event, "details": details or {}}
    log_method = getattr(system_logger, level.lower(), system_logger.info)
    log_method(f"SYSTEM_EVENT: {event} - {log_data}")


def log_file_operation(operation: str, file_path: str, rows_processed: int = 0, **kwargs) -> None:
    """Log des opérations de fichier (export des bilans)."""
    if not ENABLE_LOGGING:
        return
    log_data = {"operation": operation, "file_path": file_path, "rows_processed": rows_processed, **kwargs}
    system_logger.info(f"FILE_{operation.upper()}: {log_data}")


def get_log_summary(log_type: str = "transactions", lines: int = 100) -> str:
    """
    Retourne les dernières lignes d'un log.

    Args:
        log_type: transactions, consultations, bilan, database ou system
        lines: Nombre de lignes
    """
    if lines <= 0:
        return ""
    log_file = LOG_FILES.get(log_type)
    if not log_file or not log_file.exists():
        return f"Log {log_type} introuvable."

    with open(log_file, 'r', encoding='utf-8') as f:
        all_lines = f.readlines()
    return ''.join(all_lines[-lines:])
