"""
FORMCOACH Form Service - Feedback Messages

Human-readable coaching cues for feedback keys in English, Portuguese,
Spanish and French.
"""

from typing import Dict, Iterable, List, Optional

from core.config import settings


NO_POSE_KEY = "general.no_pose"

MESSAGES: Dict[str, Dict[str, str]] = {
    "en": {
        # General
        "general.perfect_form": "Perfect form! Keep it up!",
        "general.rep_complete": "Rep complete. Good work!",
        "general.no_pose": "Step into the frame so your whole body is visible",
        # Squat
        "squat.knees_over_toes": "Keep your knees behind your toes",
        "squat.go_deeper": "Go a little deeper",
        "squat.keep_back_straight": "Keep your back straight and chest up",
        # Lunge
        "lunge.knee_over_toe": "Keep your front knee over your ankle",
        "lunge.keep_torso_upright": "Keep your torso upright",
        "lunge.go_deeper": "Lower your back knee closer to the floor",
        # Glute bridge
        "glute_bridge.low_hips": "Push your hips higher",
        "glute_bridge.hip_asymmetry": "Keep both sides of your hips level",
        "glute_bridge.feet_too_wide": "Bring your feet closer, about hip width",
        # Jump squat
        "jump_squat.go_deeper": "Squat deeper before you jump",
        "jump_squat.land_evenly": "Land evenly on both legs",
        # Sumo squat
        "sumo_squat.go_deeper": "Sink your hips lower",
        "sumo_squat.widen_stance": "Take a wider stance",
        "sumo_squat.knees_out": "Push your knees out over your toes",
        # Donkey kick
        "donkey_kick.keep_hips_level": "Keep your hips square to the floor",
        "donkey_kick.kick_higher": "Drive your heel higher",
        # Fire hydrant
        "fire_hydrant.keep_hips_level": "Keep your hips level as you lift",
        "fire_hydrant.lift_higher": "Lift your knee higher",
        # Hip thrust
        "hip_thrust.thrust_higher": "Squeeze your glutes and lift your hips higher",
        "hip_thrust.hip_asymmetry": "Keep your hips level",
        # Wall sit
        "wall_sit.adjust_knee_angle": "Keep your knees at about 90 degrees",
        "wall_sit.keep_back_straight": "Press your back flat against the wall",
        # Plank
        "plank.lower_hips": "Lower your hips in line with your body",
        "plank.raise_hips": "Raise your hips, don't let them sag",
        "plank.hips_collapsing": "Your hips are collapsing, engage your core",
        "plank.level_shoulders": "Keep your shoulders level",
        # Side plank
        "side_plank.hip_too_high": "Lower your hips into a straight line",
        "side_plank.hip_dropping": "Lift your hips, don't let them drop",
        "side_plank.neck_dropped": "Keep your head in line with your spine",
        # Superman
        "superman.hold_position": "Lift your arms and legs off the floor",
        "superman.only_arms": "Lift your legs too",
        "superman.head_too_high": "Keep your neck neutral, look at the floor",
        # Crunch
        "crunch.crunch_higher": "Curl your shoulders higher off the floor",
        # Bicycle crunch
        "bicycle_crunch.lower_hips": "Keep your lower back on the floor",
        "bicycle_crunch.raise_hips": "Don't let your hips drop",
        # Leg raise
        "leg_raise.keep_back_flat": "Press your lower back into the floor",
        # Russian twist
        "russian_twist.maintain_lean": "Hold a steady lean back of about 45 degrees",
        # Dead bug
        "dead_bug.keep_back_flat": "Keep your lower back flat on the floor",
        "dead_bug.keep_hips_level": "Keep your hips from rotating",
        # Bird dog
        "bird_dog.keep_hips_level": "Keep your hips level",
        "bird_dog.keep_back_neutral": "Keep your back flat like a table",
        # Flutter kick
        "flutter_kick.keep_back_flat": "Press your lower back into the floor",
        # Pushups
        "pushup.keep_body_straight": "Keep your body in a straight line",
        "pushup.go_lower": "Lower your chest closer to the floor",
        "pushup.align_elbows": "Bend both elbows evenly",
        "pike_pushup.raise_hips": "Lift your hips higher into an inverted V",
        "pike_pushup.keep_body_straight": "Keep your back straight",
        "diamond_pushup.keep_body_straight": "Keep your body in a straight line",
        "diamond_pushup.go_lower": "Lower your chest to your hands",
        "diamond_pushup.bring_hands_together": "Bring your hands together under your chest",
        "wide_pushup.keep_body_straight": "Keep your body in a straight line",
        "wide_pushup.go_lower": "Lower your chest closer to the floor",
        "wide_pushup.align_elbows": "Bend both elbows evenly",
        # Tricep dip
        "tricep_dip.dip_lower": "Dip lower, elbows to 90 degrees",
        "tricep_dip.align_elbows": "Bend both elbows evenly",
        "tricep_dip.keep_hips_close": "Keep your hips close to the bench",
        # Full body
        "mountain_climber.hip_too_high": "Lower your hips",
        "mountain_climber.hip_sagging": "Lift your hips, don't let them sag",
        "burpee.arched_back": "Keep your back straight in the plank",
        "high_knees.stay_upright": "Stay tall, don't lean forward",
        "inchworm.keep_hips_aligned": "Keep your hips in line in the plank",
        "inchworm.keep_legs_straight": "Keep your legs as straight as you can",
    },
    "pt": {
        "general.perfect_form": "Forma perfeita! Continue assim!",
        "general.rep_complete": "Repetição concluída. Bom trabalho!",
        "general.no_pose": "Posicione-se para que o corpo inteiro apareça",
        "squat.knees_over_toes": "Mantenha os joelhos atrás dos dedos dos pés",
        "squat.go_deeper": "Desça um pouco mais",
        "squat.keep_back_straight": "Mantenha as costas retas e o peito aberto",
        "lunge.knee_over_toe": "Mantenha o joelho da frente alinhado ao tornozelo",
        "lunge.keep_torso_upright": "Mantenha o tronco ereto",
        "lunge.go_deeper": "Aproxime o joelho de trás do chão",
        "glute_bridge.low_hips": "Suba mais o quadril",
        "glute_bridge.hip_asymmetry": "Mantenha os dois lados do quadril nivelados",
        "glute_bridge.feet_too_wide": "Aproxime os pés, na largura do quadril",
        "jump_squat.go_deeper": "Agache mais antes de saltar",
        "jump_squat.land_evenly": "Aterrisse com as duas pernas por igual",
        "sumo_squat.go_deeper": "Desça mais o quadril",
        "sumo_squat.widen_stance": "Afaste mais os pés",
        "sumo_squat.knees_out": "Empurre os joelhos para fora",
        "donkey_kick.keep_hips_level": "Mantenha o quadril paralelo ao chão",
        "donkey_kick.kick_higher": "Leve o calcanhar mais alto",
        "fire_hydrant.keep_hips_level": "Mantenha o quadril nivelado ao elevar",
        "fire_hydrant.lift_higher": "Eleve mais o joelho",
        "hip_thrust.thrust_higher": "Contraia os glúteos e suba mais o quadril",
        "hip_thrust.hip_asymmetry": "Mantenha o quadril nivelado",
        "wall_sit.adjust_knee_angle": "Mantenha os joelhos a cerca de 90 graus",
        "wall_sit.keep_back_straight": "Apoie as costas retas na parede",
        "plank.lower_hips": "Abaixe o quadril, alinhado ao corpo",
        "plank.raise_hips": "Suba o quadril, não deixe cair",
        "plank.hips_collapsing": "O quadril está caindo, contraia o abdômen",
        "plank.level_shoulders": "Mantenha os ombros nivelados",
        "side_plank.hip_too_high": "Abaixe o quadril até formar uma linha reta",
        "side_plank.hip_dropping": "Suba o quadril, não deixe cair",
        "side_plank.neck_dropped": "Mantenha a cabeça alinhada à coluna",
        "superman.hold_position": "Tire braços e pernas do chão",
        "superman.only_arms": "Eleve as pernas também",
        "superman.head_too_high": "Mantenha o pescoço neutro, olhe para o chão",
        "crunch.crunch_higher": "Eleve mais os ombros do chão",
        "bicycle_crunch.lower_hips": "Mantenha a lombar no chão",
        "bicycle_crunch.raise_hips": "Não deixe o quadril cair",
        "leg_raise.keep_back_flat": "Pressione a lombar contra o chão",
        "russian_twist.maintain_lean": "Mantenha o tronco inclinado a cerca de 45 graus",
        "dead_bug.keep_back_flat": "Mantenha a lombar apoiada no chão",
        "dead_bug.keep_hips_level": "Não deixe o quadril girar",
        "bird_dog.keep_hips_level": "Mantenha o quadril nivelado",
        "bird_dog.keep_back_neutral": "Mantenha as costas retas como uma mesa",
        "flutter_kick.keep_back_flat": "Pressione a lombar contra o chão",
        "pushup.keep_body_straight": "Mantenha o corpo em linha reta",
        "pushup.go_lower": "Aproxime o peito do chão",
        "pushup.align_elbows": "Flexione os dois cotovelos por igual",
        "pike_pushup.raise_hips": "Suba mais o quadril formando um V invertido",
        "pike_pushup.keep_body_straight": "Mantenha as costas retas",
        "diamond_pushup.keep_body_straight": "Mantenha o corpo em linha reta",
        "diamond_pushup.go_lower": "Desça o peito até as mãos",
        "diamond_pushup.bring_hands_together": "Junte as mãos embaixo do peito",
        "wide_pushup.keep_body_straight": "Mantenha o corpo em linha reta",
        "wide_pushup.go_lower": "Aproxime o peito do chão",
        "wide_pushup.align_elbows": "Flexione os dois cotovelos por igual",
        "tricep_dip.dip_lower": "Desça mais, cotovelos a 90 graus",
        "tricep_dip.align_elbows": "Flexione os dois cotovelos por igual",
        "tricep_dip.keep_hips_close": "Mantenha o quadril perto do banco",
        "mountain_climber.hip_too_high": "Abaixe o quadril",
        "mountain_climber.hip_sagging": "Suba o quadril, não deixe cair",
        "burpee.arched_back": "Mantenha as costas retas na prancha",
        "high_knees.stay_upright": "Fique ereto, não incline para frente",
        "inchworm.keep_hips_aligned": "Mantenha o quadril alinhado na prancha",
        "inchworm.keep_legs_straight": "Mantenha as pernas o mais retas possível",
    },
    "es": {
        "general.perfect_form": "¡Forma perfecta! ¡Sigue así!",
        "general.rep_complete": "Repetición completada. ¡Buen trabajo!",
        "general.no_pose": "Colócate para que se vea todo tu cuerpo",
        "squat.knees_over_toes": "Mantén las rodillas detrás de las puntas de los pies",
        "squat.go_deeper": "Baja un poco más",
        "squat.keep_back_straight": "Mantén la espalda recta y el pecho arriba",
        "lunge.knee_over_toe": "Mantén la rodilla delantera sobre el tobillo",
        "lunge.keep_torso_upright": "Mantén el torso erguido",
        "lunge.go_deeper": "Acerca la rodilla trasera al suelo",
        "glute_bridge.low_hips": "Sube más la cadera",
        "glute_bridge.hip_asymmetry": "Mantén ambos lados de la cadera nivelados",
        "glute_bridge.feet_too_wide": "Junta los pies, al ancho de la cadera",
        "jump_squat.go_deeper": "Baja más antes de saltar",
        "jump_squat.land_evenly": "Aterriza con las dos piernas por igual",
        "sumo_squat.go_deeper": "Baja más la cadera",
        "sumo_squat.widen_stance": "Separa más los pies",
        "sumo_squat.knees_out": "Empuja las rodillas hacia fuera",
        "donkey_kick.keep_hips_level": "Mantén la cadera paralela al suelo",
        "donkey_kick.kick_higher": "Lleva el talón más alto",
        "fire_hydrant.keep_hips_level": "Mantén la cadera nivelada al elevar",
        "fire_hydrant.lift_higher": "Eleva más la rodilla",
        "hip_thrust.thrust_higher": "Aprieta los glúteos y sube más la cadera",
        "hip_thrust.hip_asymmetry": "Mantén la cadera nivelada",
        "wall_sit.adjust_knee_angle": "Mantén las rodillas a unos 90 grados",
        "wall_sit.keep_back_straight": "Apoya la espalda recta contra la pared",
        "plank.lower_hips": "Baja la cadera, alineada con el cuerpo",
        "plank.raise_hips": "Sube la cadera, no la dejes caer",
        "plank.hips_collapsing": "La cadera se está hundiendo, activa el abdomen",
        "plank.level_shoulders": "Mantén los hombros nivelados",
        "side_plank.hip_too_high": "Baja la cadera hasta formar una línea recta",
        "side_plank.hip_dropping": "Sube la cadera, no la dejes caer",
        "side_plank.neck_dropped": "Mantén la cabeza alineada con la columna",
        "superman.hold_position": "Levanta brazos y piernas del suelo",
        "superman.only_arms": "Levanta también las piernas",
        "superman.head_too_high": "Mantén el cuello neutro, mira al suelo",
        "crunch.crunch_higher": "Eleva más los hombros del suelo",
        "bicycle_crunch.lower_hips": "Mantén la zona lumbar en el suelo",
        "bicycle_crunch.raise_hips": "No dejes caer la cadera",
        "leg_raise.keep_back_flat": "Presiona la zona lumbar contra el suelo",
        "russian_twist.maintain_lean": "Mantén el torso inclinado unos 45 grados",
        "dead_bug.keep_back_flat": "Mantén la zona lumbar apoyada en el suelo",
        "dead_bug.keep_hips_level": "No dejes que la cadera gire",
        "bird_dog.keep_hips_level": "Mantén la cadera nivelada",
        "bird_dog.keep_back_neutral": "Mantén la espalda plana como una mesa",
        "flutter_kick.keep_back_flat": "Presiona la zona lumbar contra el suelo",
        "pushup.keep_body_straight": "Mantén el cuerpo en línea recta",
        "pushup.go_lower": "Acerca el pecho al suelo",
        "pushup.align_elbows": "Flexiona ambos codos por igual",
        "pike_pushup.raise_hips": "Sube más la cadera formando una V invertida",
        "pike_pushup.keep_body_straight": "Mantén la espalda recta",
        "diamond_pushup.keep_body_straight": "Mantén el cuerpo en línea recta",
        "diamond_pushup.go_lower": "Baja el pecho hasta las manos",
        "diamond_pushup.bring_hands_together": "Junta las manos debajo del pecho",
        "wide_pushup.keep_body_straight": "Mantén el cuerpo en línea recta",
        "wide_pushup.go_lower": "Acerca el pecho al suelo",
        "wide_pushup.align_elbows": "Flexiona ambos codos por igual",
        "tricep_dip.dip_lower": "Baja más, codos a 90 grados",
        "tricep_dip.align_elbows": "Flexiona ambos codos por igual",
        "tricep_dip.keep_hips_close": "Mantén la cadera cerca del banco",
        "mountain_climber.hip_too_high": "Baja la cadera",
        "mountain_climber.hip_sagging": "Sube la cadera, no la dejes caer",
        "burpee.arched_back": "Mantén la espalda recta en la plancha",
        "high_knees.stay_upright": "Mantente erguido, no te inclines hacia delante",
        "inchworm.keep_hips_aligned": "Mantén la cadera alineada en la plancha",
        "inchworm.keep_legs_straight": "Mantén las piernas lo más rectas posible",
    },
    "fr": {
        "general.perfect_form": "Forme parfaite ! Continuez comme ça !",
        "general.rep_complete": "Répétition terminée. Bon travail !",
        "general.no_pose": "Placez-vous pour que tout votre corps soit visible",
        "squat.knees_over_toes": "Gardez les genoux derrière la pointe des pieds",
        "squat.go_deeper": "Descendez un peu plus",
        "squat.keep_back_straight": "Gardez le dos droit et la poitrine haute",
        "lunge.knee_over_toe": "Gardez le genou avant au-dessus de la cheville",
        "lunge.keep_torso_upright": "Gardez le buste droit",
        "lunge.go_deeper": "Rapprochez le genou arrière du sol",
        "glute_bridge.low_hips": "Montez les hanches plus haut",
        "glute_bridge.hip_asymmetry": "Gardez les deux côtés du bassin à niveau",
        "glute_bridge.feet_too_wide": "Rapprochez les pieds, largeur de hanches",
        "jump_squat.go_deeper": "Descendez plus avant de sauter",
        "jump_squat.land_evenly": "Atterrissez sur les deux jambes",
        "sumo_squat.go_deeper": "Descendez les hanches plus bas",
        "sumo_squat.widen_stance": "Écartez davantage les pieds",
        "sumo_squat.knees_out": "Poussez les genoux vers l'extérieur",
        "donkey_kick.keep_hips_level": "Gardez le bassin parallèle au sol",
        "donkey_kick.kick_higher": "Poussez le talon plus haut",
        "fire_hydrant.keep_hips_level": "Gardez le bassin stable en levant la jambe",
        "fire_hydrant.lift_higher": "Levez le genou plus haut",
        "hip_thrust.thrust_higher": "Serrez les fessiers et montez les hanches plus haut",
        "hip_thrust.hip_asymmetry": "Gardez le bassin à niveau",
        "wall_sit.adjust_knee_angle": "Gardez les genoux à environ 90 degrés",
        "wall_sit.keep_back_straight": "Plaquez le dos contre le mur",
        "plank.lower_hips": "Descendez les hanches dans l'alignement du corps",
        "plank.raise_hips": "Remontez les hanches, ne les laissez pas tomber",
        "plank.hips_collapsing": "Vos hanches s'affaissent, gainez les abdominaux",
        "plank.level_shoulders": "Gardez les épaules à niveau",
        "side_plank.hip_too_high": "Descendez les hanches pour former une ligne droite",
        "side_plank.hip_dropping": "Remontez les hanches, ne les laissez pas tomber",
        "side_plank.neck_dropped": "Gardez la tête dans l'alignement de la colonne",
        "superman.hold_position": "Décollez les bras et les jambes du sol",
        "superman.only_arms": "Levez aussi les jambes",
        "superman.head_too_high": "Gardez la nuque neutre, regardez le sol",
        "crunch.crunch_higher": "Décollez davantage les épaules du sol",
        "bicycle_crunch.lower_hips": "Gardez le bas du dos au sol",
        "bicycle_crunch.raise_hips": "Ne laissez pas les hanches tomber",
        "leg_raise.keep_back_flat": "Plaquez le bas du dos au sol",
        "russian_twist.maintain_lean": "Gardez le buste incliné à environ 45 degrés",
        "dead_bug.keep_back_flat": "Gardez le bas du dos plaqué au sol",
        "dead_bug.keep_hips_level": "Empêchez le bassin de tourner",
        "bird_dog.keep_hips_level": "Gardez le bassin à niveau",
        "bird_dog.keep_back_neutral": "Gardez le dos plat comme une table",
        "flutter_kick.keep_back_flat": "Plaquez le bas du dos au sol",
        "pushup.keep_body_straight": "Gardez le corps bien aligné",
        "pushup.go_lower": "Rapprochez la poitrine du sol",
        "pushup.align_elbows": "Pliez les deux coudes de la même façon",
        "pike_pushup.raise_hips": "Montez les hanches pour former un V inversé",
        "pike_pushup.keep_body_straight": "Gardez le dos droit",
        "diamond_pushup.keep_body_straight": "Gardez le corps bien aligné",
        "diamond_pushup.go_lower": "Descendez la poitrine jusqu'aux mains",
        "diamond_pushup.bring_hands_together": "Rapprochez les mains sous la poitrine",
        "wide_pushup.keep_body_straight": "Gardez le corps bien aligné",
        "wide_pushup.go_lower": "Rapprochez la poitrine du sol",
        "wide_pushup.align_elbows": "Pliez les deux coudes de la même façon",
        "tricep_dip.dip_lower": "Descendez plus, coudes à 90 degrés",
        "tricep_dip.align_elbows": "Pliez les deux coudes de la même façon",
        "tricep_dip.keep_hips_close": "Gardez les hanches près du banc",
        "mountain_climber.hip_too_high": "Descendez les hanches",
        "mountain_climber.hip_sagging": "Remontez les hanches, ne les laissez pas tomber",
        "burpee.arched_back": "Gardez le dos droit en planche",
        "high_knees.stay_upright": "Restez droit, ne penchez pas vers l'avant",
        "inchworm.keep_hips_aligned": "Gardez les hanches alignées en planche",
        "inchworm.keep_legs_straight": "Gardez les jambes aussi tendues que possible",
    },
}

SUPPORTED_LOCALES = tuple(MESSAGES)


def normalize_locale(locale: Optional[str]) -> str:
    """Reduce 'pt-BR' / 'pt_BR' to 'pt'; fall back to the default locale."""
    if locale:
        language = locale.replace("_", "-").split("-")[0].lower()
        if language in MESSAGES:
            return language
    default = settings.DEFAULT_LOCALE
    return default if default in MESSAGES else "en"


def get_feedback_text(key: str, locale: Optional[str] = None) -> str:
    """Localized text for a feedback key; unknown keys come back unchanged."""
    language = normalize_locale(locale)
    text = MESSAGES[language].get(key)
    if text is None:
        text = MESSAGES["en"].get(key, key)
    return text


def localize_feedback(keys: Iterable[str], locale: Optional[str] = None) -> List[str]:
    return [get_feedback_text(key, locale) for key in keys]
