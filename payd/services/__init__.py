"""Invoice, destination, payment request and payment services over pluggable stores."""