#Drivers domain package: models, dispatch policy, eligibility rules and the directory seam.
