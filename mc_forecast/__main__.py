from mc_forecast.runner import main

main()
