# ============================================================
# OpsLearn: réservation de sessions d'apprentissage
# ------------------------------------------------------------
# Cœur : timeutils -> quota -> ledger -> conflicts ->
# authorization -> lifecycle. Le reste (API, stockage,
# événements, contenu) gravite autour.
# ============================================================
