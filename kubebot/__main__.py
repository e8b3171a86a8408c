from kubebot.launcher import main

main()
