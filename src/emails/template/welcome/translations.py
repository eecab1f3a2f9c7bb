DEFAULT_TRANSLATIONS = {
    "en": {
        "subject": "Welcome to BlockTrade",
        "greeting": "Hi",
        "intro": "Your onboarding is complete and your account is ready.",
        "roles_label": "Roles granted",
        "cta": "Sign in",
        "footer": "You received this email because an account was set up for you on BlockTrade.",
    },
    "es": {
        "subject": "Bienvenido a BlockTrade",
        "greeting": "Hola",
        "intro": "Tu incorporación ha finalizado y tu cuenta está lista.",
        "roles_label": "Roles asignados",
        "cta": "Iniciar sesión",
        "footer": "Recibes este correo porque se creó una cuenta para ti en BlockTrade.",
    },
    "fr": {
        "subject": "Bienvenue sur BlockTrade",
        "greeting": "Bonjour",
        "intro": "Votre intégration est terminée et votre compte est prêt.",
        "roles_label": "Rôles attribués",
        "cta": "Se connecter",
        "footer": "Vous recevez cet e-mail car un compte a été créé pour vous sur BlockTrade.",
    },
}
