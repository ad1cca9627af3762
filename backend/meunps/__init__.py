# Meu NPS backend package
