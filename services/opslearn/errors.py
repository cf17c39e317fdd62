# ============================================================
# errors.py: Erreurs du domaine OpsLearn
# ------------------------------------------------------------
# Un refus de réservation (TeamBusy / Overlap / QuotaFull) n'est
# PAS une exception : c'est une Decision renvoyée à l'appelant.
# Seules les pannes de stockage sont levées.
# ============================================================


class PersistenceUnavailable(Exception):
    """Le stockage (DB, API distante, fichier) n'a pas répondu.

    Pour une écriture, l'état est inconnu : la réservation peut
    exister ou non. Aucun retry n'est fait ici.
    """

    def __init__(self, operation: str, cause: object = None):
        self.operation = operation
        self.cause = cause
        super().__init__(f"storage unavailable during {operation}: {cause}")


class WriteConflict(Exception):
    """Le serveur a refusé l'écriture après re-vérification.

    Arrive quand la décision locale reposait sur une liste de
    réservations périmée (un autre client a réservé entre-temps).
    """

    def __init__(self, decision):
        self.decision = decision
        super().__init__(f"booking rejected on write: {decision.reason.value}")
